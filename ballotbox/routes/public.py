from flask import flash, make_response, redirect, render_template, request, url_for
from flask_login import login_required

from ballotbox.errors import AlreadyVoted, ElectionClosed, TransientFetchError
from ballotbox.services import gateway, vote_guard
from ballotbox.services.dashboard import list_dashboard_posts
from ballotbox.services.identity import get_current_user, is_admin
from ballotbox.services.vote_hints import add_vote_hint, store_vote_hints, sync_vote_hint
from ballotbox.services.voting import build_post_results


def _raise_for_terminal(outcome, post_id):
    if outcome["state"] == vote_guard.ALREADY_VOTED:
        raise AlreadyVoted(post_id, outcome["notice"])
    if outcome["state"] == vote_guard.ELECTION_CLOSED:
        raise ElectionClosed(outcome["notice"])


def _selected_candidate_id():
    candidate_id = request.form.get("candidate_id", type=int)
    if candidate_id is None:
        flash("Please select a candidate before continuing.", "error")
    return candidate_id


def register_public_routes(app):
    @app.route("/")
    def index():
        user = get_current_user()
        if user is not None:
            if is_admin(user):
                return redirect(url_for("admin_elections"))
            return redirect(url_for("dashboard"))
        return render_template("index.html")

    @app.route("/dashboard")
    @login_required
    def dashboard():
        user = get_current_user()
        if is_admin(user):
            return redirect(url_for("admin_elections"))

        try:
            listing = list_dashboard_posts(user.id)
        except TransientFetchError as error:
            flash(error.message, "error")
            return render_template(
                "voter/dashboard.html", user=user, election=None, posts=[]
            )

        response = make_response(
            render_template(
                "voter/dashboard.html",
                user=user,
                election=listing["election"],
                posts=listing["posts"],
            )
        )
        return store_vote_hints(response, listing["voted_post_ids"])

    @app.route("/vote/<int:post_id>")
    @login_required
    def vote_post(post_id):
        outcome = vote_guard.enter_vote_page(get_current_user(), post_id)
        _raise_for_terminal(outcome, post_id)

        return render_template(
            "voter/vote.html",
            post=outcome["post"],
            election=outcome["election"],
            candidates=outcome["candidates"],
        )

    @app.route("/vote/<int:post_id>/confirm", methods=["POST"])
    @login_required
    def confirm_vote(post_id):
        candidate_id = _selected_candidate_id()
        if candidate_id is None:
            return redirect(url_for("vote_post", post_id=post_id))

        outcome = vote_guard.confirm_selection(get_current_user(), post_id, candidate_id)
        _raise_for_terminal(outcome, post_id)

        return render_template(
            "voter/confirm.html",
            post=outcome["post"],
            election=outcome["election"],
            candidate=outcome["candidate"],
        )

    @app.route("/vote/<int:post_id>/submit", methods=["POST"])
    @login_required
    def submit_vote(post_id):
        candidate_id = _selected_candidate_id()
        if candidate_id is None:
            return redirect(url_for("vote_post", post_id=post_id))

        outcome = vote_guard.submit_vote(get_current_user(), post_id, candidate_id)
        if outcome["state"] == vote_guard.ELECTION_CLOSED:
            raise ElectionClosed(outcome["notice"])

        if request.headers.get("X-Requested-With") == "XMLHttpRequest":
            response = make_response(
                {
                    "ok": True,
                    "state": outcome["state"],
                    "message": outcome["notice"],
                    "results_url": url_for("results", post_id=post_id),
                }
            )
        else:
            response = make_response(
                render_template(
                    "voter/vote_success.html",
                    post_id=post_id,
                    post=outcome["post"],
                    notice=outcome["notice"],
                    state=outcome["state"],
                )
            )
        return add_vote_hint(response, post_id)

    @app.route("/results/<int:post_id>")
    @login_required
    def results(post_id):
        post_results = build_post_results(post_id)
        voted_here = gateway.find_vote(get_current_user().id, post_id) is not None
        response = make_response(
            render_template(
                "voter/results.html",
                results=post_results,
                post=post_results["post"],
                voted_here=voted_here,
            )
        )
        return sync_vote_hint(response, post_id, voted_here)
