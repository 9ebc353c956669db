"""Check-in persistence.

Maps CheckinState rows to engine CheckinRecord values and appends
DailyCheckin history rows. The caller owns the transaction.
"""

from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.engine.streak import CheckinOutcome, CheckinRecord
from app.models.checkin import CheckinState, DailyCheckin


def state_to_record(state: CheckinState) -> CheckinRecord:
    """ORM row -> immutable engine record."""
    return CheckinRecord(
        last_checkin_date=state.last_checkin_date,
        current_streak=state.current_streak,
        total_checkins=state.total_checkins,
        currency_balance=state.currency_balance,
        total_currency_earned=state.total_currency_earned,
        has_loyalty_badge=state.has_loyalty_badge,
        loyal_since=state.loyal_since,
    )


def _apply_record(state: CheckinState, record: CheckinRecord) -> None:
    state.last_checkin_date = record.last_checkin_date
    state.current_streak = record.current_streak
    state.total_checkins = record.total_checkins
    state.currency_balance = record.currency_balance
    state.total_currency_earned = record.total_currency_earned
    state.has_loyalty_badge = record.has_loyalty_badge
    state.loyal_since = record.loyal_since


class CheckinRepository:
    """Check-in record storage keyed by user id."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_state(self, user_id: str, for_update: bool = False) -> CheckinState | None:
        query = select(CheckinState).where(CheckinState.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_record(self, user_id: str, for_update: bool = False) -> CheckinRecord | None:
        """Load a user's record, optionally locking the row until commit."""
        state = await self._get_state(user_id, for_update=for_update)
        if state is None:
            return None
        return state_to_record(state)

    async def save_record(self, user_id: str, record: CheckinRecord) -> None:
        """Insert or update the user's record."""
        state = await self._get_state(user_id)
        if state is None:
            state = CheckinState(user_id=user_id)
            self.db.add(state)
        _apply_record(state, record)

    async def add_history(
        self,
        user_id: str,
        outcome: CheckinOutcome,
        checked_at: datetime,
    ) -> DailyCheckin:
        """Append the history row for a successful check-in."""
        reward = outcome.reward
        if reward is None:
            raise ValueError("No history for an already-claimed check-in")

        reward_type = reward.milestone_kind.value if reward.milestone_kind else "daily"
        checkin = DailyCheckin(
            user_id=user_id,
            checkin_date=outcome.updated_record.last_checkin_date,
            streak_days=reward.streak_after,
            reward_amount=reward.currency_awarded,
            reward_type=reward_type,
            milestone_label=reward.milestone_label,
            streak_broken=reward.streak_broken,
            checked_at=checked_at,
        )
        self.db.add(checkin)
        return checkin

    async def list_history(self, user_id: str, limit: int = 30) -> list[DailyCheckin]:
        """Most recent check-ins first."""
        result = await self.db.execute(
            select(DailyCheckin)
            .where(DailyCheckin.user_id == user_id)
            .order_by(DailyCheckin.checkin_date.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_since(self, user_id: str, start: date) -> list[DailyCheckin]:
        """Check-ins on or after start, oldest first."""
        result = await self.db.execute(
            select(DailyCheckin)
            .where(DailyCheckin.user_id == user_id)
            .where(DailyCheckin.checkin_date >= start)
            .order_by(DailyCheckin.checkin_date)
        )
        return list(result.scalars().all())
