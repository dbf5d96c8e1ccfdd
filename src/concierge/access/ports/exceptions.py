"""Exceptions for the access bounded context.

Failures that decide whether a user gets in (denials, failed reads) are
surfaced to the session; failures of opportunistic bookkeeping (profile
backfill writes) are absorbed by the caller.
"""


class DirectoryError(Exception):
    """Base exception for directory store operations."""

    pass


class DirectoryReadError(DirectoryError):
    """Raised when an allowlist, profile or company read fails.

    Never retried by the engine; the next identity event starts over.
    """

    def __init__(self, message: str, collection: str | None = None):
        super().__init__(message)
        self.collection = collection


class DirectoryWriteError(DirectoryError):
    """Raised when a profile merge-write fails."""

    def __init__(self, message: str, collection: str | None = None):
        super().__init__(message)
        self.collection = collection


class AccessDeniedError(Exception):
    """Raised when an email is not present in the allowlist.

    The message is user-visible and names the rejected email.
    """

    def __init__(self, email: str, message: str | None = None):
        super().__init__(message or f"{email} is not authorized")
        self.email = email


class TenantAssignmentError(Exception):
    """Raised when an explicit company assignment cannot be completed.

    The session state is left unchanged when this is raised.
    """

    pass
