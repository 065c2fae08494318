import functools
from datetime import datetime, timezone

from flask import abort, current_app, flash, redirect, render_template, request, url_for
from flask_login import login_required

from ballotbox.extensions import db
from ballotbox.models import Candidate, Election, Post, utcnow
from ballotbox.services import gateway
from ballotbox.services.identity import get_current_user, is_admin
from ballotbox.services.voting import tally_post_results


def admin_required(view):
    @functools.wraps(view)
    @login_required
    def wrapper(*args, **kwargs):
        if not is_admin(get_current_user()):
            abort(403)
        return view(*args, **kwargs)

    return wrapper


def _is_xhr():
    return request.headers.get("X-Requested-With") == "XMLHttpRequest"


def _parse_end_time(raw):
    try:
        end_time = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if end_time.tzinfo is not None:
        end_time = end_time.astimezone(timezone.utc).replace(tzinfo=None)
    return end_time


def register_admin_routes(app):
    @app.route("/admin")
    @admin_required
    def admin_elections():
        elections = Election.query.order_by(Election.end_time.desc()).all()
        return render_template("admin/elections.html", elections=elections, now=utcnow())

    @app.route("/admin/elections/new", methods=["POST"])
    @admin_required
    def create_election():
        title = (request.form.get("title") or "").strip()
        end_time = _parse_end_time((request.form.get("end_time") or "").strip())
        is_active = bool(request.form.get("is_active"))

        error = None
        if not title:
            error = "Election title is required."
        elif end_time is None:
            error = "A valid end time is required."

        if error:
            if _is_xhr():
                return {"ok": False, "error": error}, 400
            flash(error, "error")
            return redirect(url_for("admin_elections"))

        election = Election(title=title, end_time=end_time, is_active=is_active)
        db.session.add(election)
        db.session.commit()
        current_app.logger.info("Created election %s (%s)", election.id, election.title)

        if _is_xhr():
            return {
                "ok": True,
                "election": {
                    "id": election.id,
                    "title": election.title,
                    "end_time": election.end_time.isoformat(),
                    "is_active": election.is_active,
                },
            }

        flash("Election created.", "success")
        return redirect(url_for("election_detail", election_id=election.id))

    @app.route("/admin/elections/<int:election_id>")
    @admin_required
    def election_detail(election_id):
        election = db.get_or_404(Election, election_id)
        return render_template("admin/election_detail.html", election=election, now=utcnow())

    @app.route("/admin/elections/<int:election_id>/end", methods=["POST"])
    @admin_required
    def end_election(election_id):
        election = db.get_or_404(Election, election_id)
        now = utcnow()

        election.is_active = False
        if election.end_time > now:
            election.end_time = now
        db.session.commit()
        current_app.logger.info("Election %s ended by an administrator", election.id)

        if _is_xhr():
            return {"ok": True}

        flash("Election ended.", "success")
        return redirect(url_for("election_detail", election_id=election.id))

    @app.route("/admin/elections/<int:election_id>/posts/new", methods=["POST"])
    @admin_required
    def create_post(election_id):
        election = db.get_or_404(Election, election_id)
        title = (request.form.get("title") or "").strip()
        description = (request.form.get("description") or "").strip() or None

        if not title:
            if _is_xhr():
                return {"ok": False, "error": "Post title is required."}, 400
            flash("Post title is required.", "error")
            return redirect(url_for("election_detail", election_id=election.id))

        post = Post(election_id=election.id, title=title, description=description)
        db.session.add(post)
        db.session.commit()

        if _is_xhr():
            return {
                "ok": True,
                "post": {"id": post.id, "title": post.title, "description": post.description},
            }

        flash("Post added successfully.", "success")
        return redirect(url_for("election_detail", election_id=election.id))

    @app.route("/admin/posts/<int:post_id>/candidates/new", methods=["POST"])
    @admin_required
    def create_candidate(post_id):
        post = db.get_or_404(Post, post_id)
        name = (request.form.get("name") or "").strip()

        if not name:
            if _is_xhr():
                return {"ok": False, "error": "Candidate name is required."}, 400
            flash("Candidate name is required.", "error")
            return redirect(url_for("election_detail", election_id=post.election_id))

        candidate = Candidate(
            post_id=post.id,
            name=name,
            bio=(request.form.get("bio") or "").strip() or None,
            department=(request.form.get("department") or "").strip() or None,
            image_url=(request.form.get("image_url") or "").strip() or None,
        )
        db.session.add(candidate)
        db.session.commit()

        if _is_xhr():
            return {
                "ok": True,
                "candidate": {
                    "id": candidate.id,
                    "name": candidate.name,
                    "department": candidate.department,
                },
            }

        flash("Candidate added successfully.", "success")
        return redirect(url_for("election_detail", election_id=post.election_id))

    @app.route("/admin/elections/<int:election_id>/results")
    @admin_required
    def election_results(election_id):
        election = db.get_or_404(Election, election_id)
        results = []

        for post in gateway.list_posts(election.id):
            post_results = tally_post_results(gateway.get_results(post.id))
            post_results["post"] = post
            results.append(post_results)

        return render_template(
            "admin/election_results.html",
            election=election,
            results=results,
        )
