# reddit_clone/errors.py
"""
Failure types raised by the forum core.

Callers (the HTTP layer) map these onto responses; anything that is not a
``ForumError`` is a programming error and should surface as such.
"""


class ForumError(Exception):
    """Base class for every failure the core signals on purpose."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(ForumError):
    """Missing or malformed input, detected before touching storage."""


class AuthError(ForumError):
    """Credential mismatch. Always carries the same generic message."""


class NotFound(ForumError):
    """A referenced record does not exist."""


class ConflictError(ForumError):
    """A unique constraint (username, subreddit name) was violated."""


class StorageError(ForumError):
    """Any other persistence failure. The driver exception is chained as ``__cause__``."""
