"""Browser-side note of which posts this browser has voted on.

This is a display hint only. It is rewritten from the database on every
dashboard and results view, cleared on logout, and never used to decide whether a vote may be cast.
"""

from flask import current_app, request
from itsdangerous import BadSignature, URLSafeSerializer

HINT_SALT = "vote-hints"
HINT_MAX_AGE = 60 * 60 * 24 * 30


def _hint_serializer():
    return URLSafeSerializer(current_app.config["SECRET_KEY"], salt=HINT_SALT)


def load_vote_hints():
    raw = request.cookies.get(current_app.config["VOTE_HINT_COOKIE"])
    if not raw:
        return set()
    try:
        post_ids = _hint_serializer().loads(raw)
    except BadSignature:
        current_app.logger.warning("Ignoring tampered vote hint cookie")
        return set()
    if not isinstance(post_ids, list):
        return set()
    return {post_id for post_id in post_ids if isinstance(post_id, int)}


def store_vote_hints(response, post_ids):
    response.set_cookie(
        current_app.config["VOTE_HINT_COOKIE"],
        _hint_serializer().dumps(sorted(post_ids)),
        max_age=HINT_MAX_AGE,
        httponly=True,
        samesite="Lax",
    )
    return response


def sync_vote_hint(response, post_id, voted):
    hints = load_vote_hints()
    if voted:
        hints.add(post_id)
    else:
        hints.discard(post_id)
    return store_vote_hints(response, hints)


def add_vote_hint(response, post_id):
    return sync_vote_hint(response, post_id, True)


def clear_vote_hints(response):
    response.delete_cookie(current_app.config["VOTE_HINT_COOKIE"])
    return response
