"""Business logic services."""

from app.services.checkin import CheckinService

__all__ = [
    "CheckinService",
]
