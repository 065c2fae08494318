from flask import current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_login import login_required, login_user, logout_user
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from ballotbox.extensions import db
from ballotbox.models import ROLE_VOTER, User
from ballotbox.services.identity import is_admin
from ballotbox.services.vote_hints import clear_vote_hints


def register_auth_routes(app):
    @app.route("/signup", methods=["GET", "POST"])
    def signup():
        if request.method == "POST":
            username = (request.form.get("username") or "").strip()
            name = (request.form.get("name") or "").strip() or username
            email = (request.form.get("email") or "").strip().lower() or None
            password = request.form.get("password") or ""

            if not username or not password:
                flash("Username and password are required.", "error")
                return redirect(url_for("signup"))

            if len(password) < 8:
                flash("Password must be at least 8 characters long.", "error")
                return redirect(url_for("signup"))

            if User.query.filter_by(username=username).first():
                flash("That username is already taken.", "error")
                return redirect(url_for("signup"))

            new_user = User(
                username=username,
                name=name,
                email=email,
                role=ROLE_VOTER,
                password_hash=generate_password_hash(password, method="pbkdf2:sha256"),
            )

            try:
                db.session.add(new_user)
                db.session.commit()
            except SQLAlchemyError:
                db.session.rollback()
                current_app.logger.exception("Could not register user %s", username)
                flash("Database error: Could not register user.", "error")
                return redirect(url_for("signup"))

            flash("Account created successfully! Please log in.", "success")
            return redirect(url_for("login"))

        return render_template("auth/signup.html")

    @app.route("/check-username", methods=["POST"])
    def check_username():
        data = request.get_json(silent=True) or {}
        username = (data.get("username") or "").strip()
        user = User.query.filter_by(username=username).first()
        return jsonify({"exists": user is not None})

    @app.route("/login", methods=["GET", "POST"])
    def login():
        error = None

        if request.method == "POST":
            username = (request.form.get("username") or "").strip()
            password = request.form.get("password") or ""
            remember = bool(request.form.get("remember"))

            user = User.query.filter_by(username=username).first()
            if not user or not check_password_hash(user.password_hash, password):
                error = "Invalid username or password."
                current_app.logger.warning("Failed login for username %s", username)
            else:
                login_user(user, remember=remember)
                if is_admin(user):
                    return redirect(url_for("admin_elections"))
                return redirect(url_for("dashboard"))

        return render_template("auth/login.html", error=error)

    @app.route("/logout")
    @login_required
    def logout():
        logout_user()
        return clear_vote_hints(redirect(url_for("login")))
