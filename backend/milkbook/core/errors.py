"""Domain errors raised by repositories and services.

Routers translate them to HTTP responses; anything else that escapes a
handler is an internal error.
"""


class NotFoundError(LookupError):
    """A referenced record does not exist within the caller's account."""


class ConflictError(Exception):
    """A write was rejected by a uniqueness constraint."""


class AuthenticationError(Exception):
    """Credentials did not match an account."""
