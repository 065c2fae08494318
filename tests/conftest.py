from datetime import timedelta
from pathlib import Path
import sys
import os

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Safety default for any module-level app creation during test imports.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from ballotbox import create_app
from ballotbox.extensions import db
from ballotbox.models import ROLE_ADMIN, Candidate, Election, Post, User, Vote, utcnow


@pytest.fixture()
def app(tmp_path: Path):
    db_file = tmp_path / "test.sqlite3"
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}",
            "SQLALCHEMY_ENGINE_OPTIONS": {},
            "SECRET_KEY": "test-secret",
        }
    )

    with app.app_context():
        driver = db.engine.url.drivername
        if driver != "sqlite":
            raise RuntimeError(
                f"Test database must be SQLite, got '{driver}'. Refusing to run destructive test setup."
            )
        db.drop_all()
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db_session(app):
    with app.app_context():
        yield db.session


@pytest.fixture()
def voter_user(db_session):
    user = User(
        username="voter1",
        name="Vera Voter",
        email="voter1@example.com",
        password_hash="hashed-password",
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def other_voter(db_session):
    user = User(
        username="voter2",
        name="Otto Other",
        email="voter2@example.com",
        password_hash="hashed-password",
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def admin_user(db_session):
    user = User(
        username="admin1",
        name="Ada Admin",
        email="admin1@example.com",
        password_hash="hashed-password",
        role=ROLE_ADMIN,
    )
    db_session.add(user)
    db_session.commit()
    return user


def _logged_in(client, user):
    with client.session_transaction() as session:
        session["_user_id"] = str(user.id)
        session["_fresh"] = True
    return client


@pytest.fixture()
def auth_client(client, voter_user):
    return _logged_in(client, voter_user)


@pytest.fixture()
def admin_client(client, admin_user):
    return _logged_in(client, admin_user)


@pytest.fixture()
def make_election(db_session):
    def _make(title="Student Council", ends_in=timedelta(days=1), is_active=True):
        election = Election(title=title, end_time=utcnow() + ends_in, is_active=is_active)
        db_session.add(election)
        db_session.commit()
        return election

    return _make


@pytest.fixture()
def make_post(db_session):
    def _make(election, title="President", description=None, candidates=()):
        post = Post(election_id=election.id, title=title, description=description)
        db_session.add(post)
        db_session.flush()
        for name in candidates:
            db_session.add(Candidate(post_id=post.id, name=name, department="Science"))
        db_session.commit()
        return post

    return _make


@pytest.fixture()
def ballot(make_election, make_post):
    """An open election with one post and two candidates."""
    election = make_election()
    post = make_post(election, candidates=("Alice", "Bob"))
    alice, bob = sorted(post.candidates, key=lambda candidate: candidate.name)
    return {"election": election, "post": post, "alice": alice, "bob": bob}


@pytest.fixture()
def cast_vote(db_session):
    def _cast(user, post, candidate):
        vote = Vote(user_id=user.id, post_id=post.id, candidate_id=candidate.id)
        db_session.add(vote)
        db_session.commit()
        return vote

    return _cast
