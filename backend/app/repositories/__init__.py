"""Persistence adapters."""

from app.repositories.checkin import CheckinRepository, state_to_record

__all__ = ["CheckinRepository", "state_to_record"]
