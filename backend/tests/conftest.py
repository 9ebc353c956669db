"""Shared fixtures: in-memory repository, movable clock, mocked Redis and session."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.engine.streak import CheckinRecord
from app.models.checkin import DailyCheckin


class FakeCheckinRepository:
    """In-memory stand-in for CheckinRepository."""

    def __init__(self):
        self.records: dict[str, CheckinRecord] = {}
        self.history: list[DailyCheckin] = []
        self.locked_reads: list[str] = []

    async def get_record(self, user_id, for_update=False):
        if for_update:
            self.locked_reads.append(user_id)
        return self.records.get(user_id)

    async def save_record(self, user_id, record):
        self.records[user_id] = record

    async def add_history(self, user_id, outcome, checked_at):
        reward = outcome.reward
        row = DailyCheckin(
            user_id=user_id,
            checkin_date=outcome.updated_record.last_checkin_date,
            streak_days=reward.streak_after,
            reward_amount=reward.currency_awarded,
            reward_type=reward.milestone_kind.value if reward.milestone_kind else "daily",
            milestone_label=reward.milestone_label,
            streak_broken=reward.streak_broken,
            checked_at=checked_at,
        )
        self.history.append(row)
        return row

    async def list_history(self, user_id, limit=30):
        rows = [r for r in self.history if r.user_id == user_id]
        return sorted(rows, key=lambda r: r.checkin_date, reverse=True)[:limit]

    async def list_since(self, user_id, start):
        rows = [r for r in self.history if r.user_id == user_id and r.checkin_date >= start]
        return sorted(rows, key=lambda r: r.checkin_date)


class MutableClock:
    """Clock the test can move forward or backward.

    With step set, every read advances the clock by that amount.
    """

    def __init__(self, now: datetime, step: timedelta | None = None):
        self.now = now
        self.step = step

    def __call__(self) -> datetime:
        now = self.now
        if self.step is not None:
            self.now = now + self.step
        return now


@pytest.fixture
def clock():
    return MutableClock(datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def fake_repo():
    return FakeCheckinRepository()


@pytest.fixture
def redis():
    mock_redis = AsyncMock()
    mock_redis.set.return_value = True
    mock_redis.eval.return_value = 1
    return mock_redis


@pytest.fixture
def db():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session
