"""Checkpoints that keep a voter from casting a second vote on a post.

A voting session moves through these states::

    CHECKING -> ALREADY_VOTED | ELECTION_CLOSED | SELECTING
    SELECTING -> CONFIRMING -> SUBMITTING
    SUBMITTING -> SUCCESS | DUPLICATE_DETECTED | ELECTION_CLOSED

ALREADY_VOTED, ELECTION_CLOSED, SUCCESS and DUPLICATE_DETECTED are
terminal. Database failures are raised as ``TransientFetchError`` and the
page controller turns them into a notice.

The checks below run in separate requests, so a vote cast from another tab
can always slip in between them. Only the ``uq_votes_user_post`` constraint
is authoritative; a conflict it reports is treated as a recorded vote.
"""

from flask import current_app

from ballotbox.errors import NotAuthenticated, NotFound, UniqueConstraintViolation
from ballotbox.models import utcnow
from ballotbox.services import gateway

CHECKING = "CHECKING"
ALREADY_VOTED = "ALREADY_VOTED"
ELECTION_CLOSED = "ELECTION_CLOSED"
SELECTING = "SELECTING"
CONFIRMING = "CONFIRMING"
SUBMITTING = "SUBMITTING"
SUCCESS = "SUCCESS"
DUPLICATE_DETECTED = "DUPLICATE_DETECTED"

TERMINAL_STATES = frozenset({ALREADY_VOTED, ELECTION_CLOSED, SUCCESS, DUPLICATE_DETECTED})

DUPLICATE_NOTICE = "It looks like you've already voted for this position."


def _outcome(state, **extra):
    outcome = {
        "state": state,
        "post": None,
        "election": None,
        "candidates": [],
        "candidate": None,
        "vote": None,
        "notice": None,
    }
    outcome.update(extra)
    return outcome


def _require_user(user):
    if user is None:
        raise NotAuthenticated()


def _load_open_post(post_id, now):
    post = gateway.get_post_with_election(post_id)
    if post is None:
        raise NotFound("Post not found.")
    if post.election is None:
        raise NotFound("Election data could not be found for this post.")
    return post, post.election.has_ended(now)


def _find_candidate(post_id, candidate_id):
    for candidate in gateway.list_candidates([post_id]):
        if candidate.id == candidate_id:
            return candidate
    raise NotFound("Please select a candidate for this position.")


def enter_vote_page(user, post_id, now=None):
    _require_user(user)
    now = now or utcnow()

    if gateway.find_vote(user.id, post_id) is not None:
        return _outcome(ALREADY_VOTED, notice="Redirecting you to the results for this position.")

    post, closed = _load_open_post(post_id, now)
    if closed:
        current_app.logger.info(
            "User %s opened post %s after its election ended", user.id, post_id
        )
        return _outcome(
            ELECTION_CLOSED,
            post=post,
            election=post.election,
            notice="Voting for this position is now closed.",
        )

    return _outcome(
        SELECTING,
        post=post,
        election=post.election,
        candidates=gateway.list_candidates([post_id]),
    )


def confirm_selection(user, post_id, candidate_id, now=None):
    outcome = enter_vote_page(user, post_id, now=now)
    if outcome["state"] != SELECTING:
        return outcome

    candidate = _find_candidate(post_id, candidate_id)
    outcome.update(state=CONFIRMING, candidate=candidate)
    return outcome


def submit_vote(user, post_id, candidate_id, now=None):
    _require_user(user)
    now = now or utcnow()

    # Must complete before the insert is attempted.
    if gateway.find_vote(user.id, post_id) is not None:
        current_app.logger.info(
            "Duplicate vote for post %s by user %s caught before submit", post_id, user.id
        )
        return _outcome(DUPLICATE_DETECTED, notice=DUPLICATE_NOTICE)

    post, closed = _load_open_post(post_id, now)
    if closed:
        return _outcome(
            ELECTION_CLOSED,
            post=post,
            election=post.election,
            notice="Voting for this position is now closed.",
        )

    candidate = _find_candidate(post_id, candidate_id)

    try:
        vote = gateway.submit_vote(post_id, candidate.id, user.id)
    except UniqueConstraintViolation as exc:
        current_app.logger.info(
            "Duplicate vote for post %s by user %s rejected by the database",
            post_id,
            user.id,
        )
        return _outcome(
            DUPLICATE_DETECTED,
            post=post,
            election=post.election,
            candidate=candidate,
            notice=exc.message,
        )

    current_app.logger.info("Recorded vote %s for post %s", vote.id, post_id)
    return _outcome(
        SUCCESS,
        post=post,
        election=post.election,
        candidate=candidate,
        vote=vote,
    )
