"""Error kinds surfaced to callers of the attendance operations."""

from __future__ import annotations


class AttendanceError(Exception):
    """Base class for failures reported to a caller as a kind plus a short message."""

    status = "UNKNOWN"
    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"status": self.status, "message": self.message}


class InvalidArgument(AttendanceError):
    status = "INVALID_ARGUMENT"
    http_status = 400


class DeadlineExceeded(AttendanceError):
    status = "DEADLINE_EXCEEDED"
    http_status = 504


class AlreadyExists(AttendanceError):
    status = "ALREADY_EXISTS"
    http_status = 409


class FailedPrecondition(AttendanceError):
    status = "FAILED_PRECONDITION"
    http_status = 400


class Internal(AttendanceError):
    status = "INTERNAL"
    http_status = 500


class MalformedRecordError(ValueError):
    """Raised when a Notion record is missing a property the model requires."""


__all__ = [
    "AlreadyExists",
    "AttendanceError",
    "DeadlineExceeded",
    "FailedPrecondition",
    "Internal",
    "InvalidArgument",
    "MalformedRecordError",
]
