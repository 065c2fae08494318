import pytest

from ballotbox.errors import NotFound
from ballotbox.models import Candidate, User
from ballotbox.services.voting import build_post_results, tally_post_results


def _make_voters(db_session, count, prefix):
    voters = [
        User(username=f"{prefix}{index}", name=f"{prefix} {index}", password_hash="x")
        for index in range(count)
    ]
    db_session.add_all(voters)
    db_session.commit()
    return voters


def test_zero_votes_gives_every_candidate_zero_percent(app, ballot):
    result = build_post_results(ballot["post"].id)

    assert result["total_votes"] == 0
    assert len(result["candidates"]) == 2
    assert all(row["percentage"] == 0 for row in result["candidates"])
    assert all(row["vote_count"] == 0 for row in result["candidates"])
    assert result["winners"] == []
    assert result["is_tie"] is False


def test_three_to_one_split(db_session, ballot, cast_vote):
    for voter in _make_voters(db_session, 3, "a"):
        cast_vote(voter, ballot["post"], ballot["alice"])
    for voter in _make_voters(db_session, 1, "b"):
        cast_vote(voter, ballot["post"], ballot["bob"])

    result = build_post_results(ballot["post"].id)
    by_name = {row["name"]: row for row in result["candidates"]}

    assert result["total_votes"] == 4
    assert by_name["Alice"]["vote_count"] == 3
    assert by_name["Alice"]["percentage"] == 75.00
    assert by_name["Bob"]["percentage"] == 25.00
    assert [row["name"] for row in result["winners"]] == ["Alice"]
    assert result["post"].id == ballot["post"].id


def test_result_rows_carry_candidate_details(db_session, ballot):
    ballot["alice"].image_url = "https://example.com/alice.png"
    db_session.commit()

    result = build_post_results(ballot["post"].id)
    alice = next(row for row in result["candidates"] if row["name"] == "Alice")

    assert alice["candidate_id"] == ballot["alice"].id
    assert alice["department"] == "Science"
    assert alice["image_url"] == "https://example.com/alice.png"


def test_tie_lists_all_leaders(db_session, ballot, cast_vote):
    first, second = _make_voters(db_session, 2, "t")
    cast_vote(first, ballot["post"], ballot["alice"])
    cast_vote(second, ballot["post"], ballot["bob"])

    result = build_post_results(ballot["post"].id)

    assert result["is_tie"] is True
    assert {row["name"] for row in result["winners"]} == {"Alice", "Bob"}
    assert result["top_vote_count"] == 1


def test_percentages_are_rounded_to_two_places():
    rows = [
        {"candidate": Candidate(id=1, name="A"), "vote_count": 1},
        {"candidate": Candidate(id=2, name="B"), "vote_count": 2},
    ]

    result = tally_post_results(rows)
    by_name = {row["name"]: row["percentage"] for row in result["candidates"]}

    assert by_name == {"A": 33.33, "B": 66.67}
    assert result["candidates"][0]["name"] == "B"


def test_post_without_candidates_has_empty_results(app, make_election, make_post):
    post = make_post(make_election(), title="Treasurer")

    result = build_post_results(post.id)

    assert result["total_votes"] == 0
    assert result["candidates"] == []


def test_unknown_post_raises_not_found(app):
    with pytest.raises(NotFound):
        build_post_results(9999)
