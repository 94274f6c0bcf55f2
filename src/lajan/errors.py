"""
Error taxonomy for progress tracking and synchronization.

Callers decide retry policy from the class alone:
- UserMismatch, ValidationError, InvalidArgument: caller error, never retried.
- StorageUnavailable: transient, retry with backoff.
- GenerationUnavailable: absorbed by the quiz layer, never reaches the user.
"""


class ProgressError(Exception):
    """Base class for all domain errors."""


class UserMismatch(ProgressError):
    """Client and server records (or token and record) disagree on userId."""

    def __init__(self, expected: str, actual: str):
        super().__init__(f"User ID mismatch in progress data (expected={expected!r} got={actual!r})")
        self.expected = expected
        self.actual = actual


class ValidationError(ProgressError):
    """Malformed ProgressRecord shape: wrong types, negative counters, bad scores."""

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class InvalidArgument(ProgressError):
    """Bad scalar input to a pure operation (timestamps, point amounts, streaks)."""


class StorageUnavailable(ProgressError):
    """The progress store could not be read or written. Safe to retry."""


class GenerationUnavailable(ProgressError):
    """The text-generation collaborator failed or returned unusable output."""
