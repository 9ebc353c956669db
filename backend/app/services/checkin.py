"""Daily check-in service.

Wraps the pure streak engine in the atomic load -> evaluate -> persist
sequence:
- per-user Redis lock so concurrent requests cannot both pass the
  same-day check
- SELECT ... FOR UPDATE on the state row
- (user_id, checkin_date) unique constraint as the last line of defence
"""

from collections.abc import Callable
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from redis.asyncio import Redis
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.engine.milestones import MilestoneTable
from app.engine.streak import (
    CheckinOutcome,
    CheckinRecord,
    CheckinStatus,
    evaluate_checkin,
    get_status,
    new_record,
)
from app.logging_config import get_logger
from app.models.checkin import DailyCheckin
from app.repositories.checkin import CheckinRepository
from app.utils.errors import CheckinInProgressError, ClockRegressionError, InvalidRecordError
from app.utils.redis_client import UserLock

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CheckinService:
    """Check-in service."""

    LOCK_KEY_PREFIX = "checkin:lock:"

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis,
        settings: Settings | None = None,
        *,
        milestones: MilestoneTable | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.repo = CheckinRepository(db)
        self.milestones = milestones if milestones is not None else self.settings.milestone_table
        self._lock = UserLock(redis, self.LOCK_KEY_PREFIX, self.settings.checkin_lock_ttl_seconds)
        self._clock = clock
        self._tz = ZoneInfo(self.settings.checkin_timezone)

    def today(self, now: datetime | None = None) -> date:
        """Calendar date in the configured timezone.

        The clock must return timezone-aware datetimes.
        """
        now = now or self._clock()
        return now.astimezone(self._tz).date()

    async def _load(self, user_id: str, for_update: bool = False) -> CheckinRecord:
        record = await self.repo.get_record(user_id, for_update=for_update)
        if record is None:
            return new_record(self.settings.checkin_initial_currency_balance)
        return record

    async def check_in(self, user_id: str) -> CheckinOutcome:
        """Attempt today's check-in for a user.

        Raises:
            CheckinInProgressError: Another request for this user holds the
                lock, or lost the race on the unique constraint
            ClockRegressionError: today precedes the stored check-in date
            InvalidRecordError: The stored record is corrupt
        """
        # "today" is fixed once for the whole evaluation
        now = self._clock()
        today = self.today(now)

        async with self._lock.hold(user_id) as acquired:
            if not acquired:
                logger.info("checkin_lock_busy", user_id=user_id)
                raise CheckinInProgressError(user_id)

            record = await self._load(user_id, for_update=True)

            try:
                outcome = evaluate_checkin(record, today, self.milestones)
            except ClockRegressionError as e:
                logger.error(
                    "checkin_clock_regression",
                    user_id=user_id,
                    today=e.today.isoformat(),
                    last_checkin_date=e.last_checkin_date.isoformat(),
                )
                raise
            except InvalidRecordError as e:
                logger.error("checkin_invalid_record", user_id=user_id, **e.details)
                raise

            if outcome.already_checked_in:
                logger.info("checkin_already_claimed", user_id=user_id, date=today.isoformat())
                return outcome

            await self.repo.save_record(user_id, outcome.updated_record)
            await self.repo.add_history(user_id, outcome, checked_at=now)

            try:
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                logger.warning("checkin_duplicate_rejected", user_id=user_id, date=today.isoformat())
                raise CheckinInProgressError(user_id) from e

        reward = outcome.reward
        logger.info(
            "checkin_completed",
            user_id=user_id,
            date=today.isoformat(),
            streak=reward.streak_after,
            currency_awarded=reward.currency_awarded,
            milestone=reward.milestone_label,
            streak_broken=reward.streak_broken,
        )
        if reward.loyalty_badge_granted:
            logger.info("loyalty_badge_granted", user_id=user_id, streak=reward.streak_after)

        return outcome

    async def get_status(
        self, user_id: str, today: date | None = None
    ) -> tuple[CheckinRecord, CheckinStatus]:
        """Current record plus today's claim eligibility."""
        record = await self._load(user_id)
        return record, get_status(record, today or self.today(), self.milestones)

    async def get_history(self, user_id: str, limit: int = 30) -> list[DailyCheckin]:
        return await self.repo.list_history(user_id, limit)

    async def get_monthly_checkins(
        self, user_id: str, today: date | None = None
    ) -> list[DailyCheckin]:
        """Check-ins since the first day of today's month."""
        first_day = (today or self.today()).replace(day=1)
        return await self.repo.list_since(user_id, first_day)
