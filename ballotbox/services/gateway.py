"""Database reads and writes used by the voting pages.

Each call either returns plain model objects or raises one of the errors
in :mod:`ballotbox.errors`; SQLAlchemy exceptions never leak out of here.
"""

import functools

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from ballotbox.errors import TransientFetchError, UniqueConstraintViolation
from ballotbox.extensions import db
from ballotbox.models import Candidate, Election, Post, Vote

POSTGRES_UNIQUE_VIOLATION = "23505"
MYSQL_DUPLICATE_ENTRY = 1062


def is_unique_violation(exc):
    orig = getattr(exc, "orig", None)
    if orig is None:
        return False

    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate == POSTGRES_UNIQUE_VIOLATION:
        return True

    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True

    text = str(orig)
    return "UNIQUE constraint failed" in text or "Duplicate entry" in text


def _translate_errors(fn):
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.exception("Database call %s failed", fn.__name__)
            raise TransientFetchError() from exc

    return wrapper


@_translate_errors
def list_elections(active=True):
    query = Election.query
    if active is not None:
        query = query.filter_by(is_active=active)
    return query.order_by(Election.id).all()


@_translate_errors
def list_posts(election_id):
    return Post.query.filter_by(election_id=election_id).order_by(Post.title).all()


@_translate_errors
def list_candidates(post_ids):
    post_ids = list(post_ids)
    if not post_ids:
        return []
    return (
        Candidate.query.filter(Candidate.post_id.in_(post_ids))
        .order_by(Candidate.id)
        .all()
    )


@_translate_errors
def find_vote(user_id, post_id):
    return Vote.query.filter_by(user_id=user_id, post_id=post_id).first()


@_translate_errors
def list_user_votes(user_id):
    return Vote.query.filter_by(user_id=user_id).all()


@_translate_errors
def get_post_with_election(post_id):
    return (
        Post.query.options(joinedload(Post.election))
        .filter_by(id=post_id)
        .first()
    )


@_translate_errors
def submit_vote(post_id, candidate_id, user_id):
    vote = Vote(user_id=user_id, post_id=post_id, candidate_id=candidate_id)
    db.session.add(vote)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        if is_unique_violation(exc):
            raise UniqueConstraintViolation() from exc
        raise
    return vote


@_translate_errors
def get_results(post_id):
    counts = (
        db.session.query(
            Vote.candidate_id.label("candidate_id"),
            func.count(Vote.id).label("vote_count"),
        )
        .filter(Vote.post_id == post_id)
        .group_by(Vote.candidate_id)
        .subquery()
    )
    rows = (
        db.session.query(Candidate, func.coalesce(counts.c.vote_count, 0))
        .outerjoin(counts, counts.c.candidate_id == Candidate.id)
        .filter(Candidate.post_id == post_id)
        .order_by(Candidate.id)
        .all()
    )
    return [
        {"candidate": candidate, "vote_count": int(vote_count)}
        for candidate, vote_count in rows
    ]
