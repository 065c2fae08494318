"""Failures a voting session can run into.

Every error here is caught by the page controllers and turned into a
redirect or a flashed notice; none of them is fatal to the process.
"""


class VotingError(Exception):
    message = "Something went wrong."

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class NotAuthenticated(VotingError):
    message = "Please log in to continue."


class NotFound(VotingError):
    message = "The requested position could not be found."


class ElectionClosed(VotingError):
    message = "Voting for this position is now closed."


class AlreadyVoted(VotingError):
    message = "You have already voted for this position."

    def __init__(self, post_id, message=None):
        super().__init__(message)
        self.post_id = post_id


class UniqueConstraintViolation(VotingError):
    message = "Your vote has already been recorded for this position."


class TransientFetchError(VotingError):
    message = "We could not reach the database. Please try again."
