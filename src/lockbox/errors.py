"""Failure types raised by the resource creation workflow.

Steps inside the workflow return error mappings; these exceptions are only
raised at the transaction boundary, where they also trigger rollback. The
API layer renders each of them as a JSON:API error envelope.
"""

from __future__ import annotations

# Field path (e.g. ``secrets[0].data``) -> error codes
ValidationErrors = dict[str, list[str]]


def merge_errors(target: ValidationErrors, extra: ValidationErrors) -> ValidationErrors:
    """Append the codes of ``extra`` onto ``target`` in place and return it."""
    for path, codes in extra.items():
        bucket = target.setdefault(path, [])
        for code in codes:
            if code not in bucket:
                bucket.append(code)
    return target


class LockboxError(Exception):
    """Base class for all workflow failures."""

    message = "The operation failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationFailure(LockboxError):
    """One or more field-level rules were violated; the client can fix the input."""

    message = "Could not validate resource data."

    def __init__(self, errors: ValidationErrors, message: str | None = None) -> None:
        super().__init__(message)
        self.errors = errors


class StorageFailure(LockboxError):
    """The storage engine rejected the write or became unavailable."""

    message = "The resource could not be saved."


class NotificationFailure(LockboxError):
    """A creation listener raised while the transaction was open."""

    message = "The resource could not be saved."

    def __init__(self, listener: str, message: str | None = None) -> None:
        super().__init__(message)
        self.listener = listener


class NotFoundFailure(LockboxError):
    """The requested resource does not exist or is not visible to the user."""

    message = "The resource does not exist."
