"""Custom exception classes for check-in errors.

Provides structured error handling with error codes and user-friendly messages.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes for check-in errors."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Check-in errors
    CLOCK_REGRESSION = "CLOCK_REGRESSION"
    INVALID_RECORD = "INVALID_RECORD"
    CHECKIN_IN_PROGRESS = "CHECKIN_IN_PROGRESS"


class CheckinError(Exception):
    """Base exception for check-in errors.

    Attributes:
        code: Error code for programmatic handling
        message: User-friendly error message
        details: Additional error details
        recoverable: Whether retrying the same request can succeed
    """

    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "errorCode": self.code,
            "errorMessage": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


class ClockRegressionError(CheckinError):
    """Raised when 'today' precedes the last recorded check-in date."""

    def __init__(self, today: date, last_checkin_date: date):
        self.today = today
        self.last_checkin_date = last_checkin_date
        super().__init__(
            code=ErrorCode.CLOCK_REGRESSION,
            message=(
                f"Check-in date {today.isoformat()} precedes last check-in "
                f"{last_checkin_date.isoformat()}"
            ),
            details={
                "today": today.isoformat(),
                "lastCheckinDate": last_checkin_date.isoformat(),
            },
            recoverable=False,
        )


class InvalidRecordError(CheckinError):
    """Raised when a check-in record violates a structural invariant."""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        super().__init__(
            code=ErrorCode.INVALID_RECORD,
            message=f"Invalid check-in record: {field}={value!r} ({reason})",
            details={"field": field, "value": repr(value), "reason": reason},
            recoverable=False,
        )


class CheckinInProgressError(CheckinError):
    """Raised when another check-in for the same user holds the lock."""

    def __init__(self, user_id: str):
        super().__init__(
            code=ErrorCode.CHECKIN_IN_PROGRESS,
            message="A check-in for this user is already being processed",
            details={"userId": user_id},
            recoverable=True,
        )


class MissingUserError(CheckinError):
    """Raised when a request arrives without a user identity."""

    def __init__(self):
        super().__init__(
            code=ErrorCode.UNAUTHORIZED,
            message="User identity is required",
            recoverable=False,
        )
