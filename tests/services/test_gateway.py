from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from ballotbox.errors import TransientFetchError, UniqueConstraintViolation
from ballotbox.models import Vote
from ballotbox.services import gateway


def test_submit_vote_twice_hits_unique_constraint(db_session, voter_user, ballot):
    post = ballot["post"]
    gateway.submit_vote(post.id, ballot["alice"].id, voter_user.id)

    with pytest.raises(UniqueConstraintViolation):
        gateway.submit_vote(post.id, ballot["bob"].id, voter_user.id)

    votes = Vote.query.filter_by(user_id=voter_user.id, post_id=post.id).all()
    assert len(votes) == 1
    assert votes[0].candidate_id == ballot["alice"].id


def test_other_voters_can_still_vote_on_the_same_post(db_session, voter_user, other_voter, ballot):
    post = ballot["post"]
    gateway.submit_vote(post.id, ballot["alice"].id, voter_user.id)
    gateway.submit_vote(post.id, ballot["alice"].id, other_voter.id)

    assert Vote.query.filter_by(post_id=post.id).count() == 2


def test_find_vote(db_session, voter_user, ballot, cast_vote):
    assert gateway.find_vote(voter_user.id, ballot["post"].id) is None

    vote = cast_vote(voter_user, ballot["post"], ballot["bob"])

    assert gateway.find_vote(voter_user.id, ballot["post"].id).id == vote.id


def test_list_elections_filters_on_active_flag(app, make_election):
    active = make_election(title="Now")
    make_election(title="Archived", is_active=False)

    assert [election.id for election in gateway.list_elections(active=True)] == [active.id]
    assert len(gateway.list_elections(active=None)) == 2


def test_list_posts_orders_by_title(app, make_election, make_post):
    election = make_election()
    make_post(election, title="Treasurer")
    make_post(election, title="President")

    titles = [post.title for post in gateway.list_posts(election.id)]

    assert titles == ["President", "Treasurer"]


def test_list_candidates_with_no_posts_is_empty(app):
    assert gateway.list_candidates([]) == []


def test_get_post_with_election(app, ballot):
    post = gateway.get_post_with_election(ballot["post"].id)

    assert post.election.id == ballot["election"].id
    assert gateway.get_post_with_election(9999) is None


def test_database_failures_become_transient_errors(app):
    @gateway._translate_errors
    def broken():
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    with pytest.raises(TransientFetchError):
        broken()


@pytest.mark.parametrize(
    "orig",
    [
        SimpleNamespace(pgcode="23505", args=()),
        SimpleNamespace(sqlstate="23505", args=()),
        Exception(1062, "Duplicate entry '1-1' for key 'uq_votes_user_post'"),
        Exception("UNIQUE constraint failed: votes.user_id, votes.post_id"),
    ],
)
def test_unique_violation_is_recognised_across_drivers(orig):
    assert gateway.is_unique_violation(IntegrityError("INSERT", {}, orig))


def test_foreign_key_violation_is_not_a_duplicate():
    orig = Exception("FOREIGN KEY constraint failed")
    assert not gateway.is_unique_violation(IntegrityError("INSERT", {}, orig))
