from ballotbox.models.candidate import Candidate
from ballotbox.models.election import Election, utcnow
from ballotbox.models.post import Post
from ballotbox.models.user import ROLE_ADMIN, ROLE_VOTER, User
from ballotbox.models.vote import Vote

__all__ = [
    "User",
    "Election",
    "Post",
    "Candidate",
    "Vote",
    "ROLE_ADMIN",
    "ROLE_VOTER",
    "utcnow",
]
