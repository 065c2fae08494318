from flask import flash, redirect, request, url_for

from ballotbox.errors import (
    AlreadyVoted,
    ElectionClosed,
    NotAuthenticated,
    NotFound,
    TransientFetchError,
)


def _wants_json():
    return request.headers.get("X-Requested-With") == "XMLHttpRequest"


def register_error_handlers(app):
    @app.errorhandler(NotAuthenticated)
    def handle_not_authenticated(error):
        if _wants_json():
            return {"ok": False, "error": error.message}, 401
        flash(error.message, "error")
        return redirect(url_for("login"))

    @app.errorhandler(NotFound)
    def handle_not_found(error):
        if _wants_json():
            return {"ok": False, "error": error.message}, 404
        flash(error.message, "error")
        return redirect(url_for("dashboard"))

    @app.errorhandler(ElectionClosed)
    def handle_election_closed(error):
        if _wants_json():
            return {"ok": False, "error": error.message}, 409
        flash(error.message, "error")
        return redirect(url_for("dashboard"))

    @app.errorhandler(AlreadyVoted)
    def handle_already_voted(error):
        if _wants_json():
            return {"ok": True, "already_voted": True, "message": error.message}
        flash(error.message, "info")
        return redirect(url_for("results", post_id=error.post_id))

    @app.errorhandler(TransientFetchError)
    def handle_transient_error(error):
        if _wants_json():
            return {"ok": False, "error": error.message, "retryable": True}, 503
        flash(error.message, "error")
        return redirect(url_for("dashboard"))
