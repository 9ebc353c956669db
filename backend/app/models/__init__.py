"""Database models."""

from app.models.base import Base, TimestampMixin
from app.models.checkin import CheckinState, DailyCheckin

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Checkin
    "CheckinState",
    "DailyCheckin",
]
