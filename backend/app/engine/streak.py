"""Daily check-in streak engine.

Pure functions over an immutable CheckinRecord and a caller-supplied
calendar date. Nothing here reads the clock or touches storage: the caller
computes "today" once per request in its configured timezone, passes the
persisted record in, and persists the returned record.

State updates are performed via dataclasses.replace().
"""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from app.engine.milestones import MilestoneKind, MilestoneReward, MilestoneTable
from app.utils.errors import ClockRegressionError, InvalidRecordError


# =============================================================================
# Models
# =============================================================================


@dataclass(frozen=True)
class CheckinRecord:
    """Per-user check-in state.

    current_streak is the streak as of last_checkin_date; a missed day is
    only reflected at the next check-in.
    """

    last_checkin_date: date | None = None
    current_streak: int = 0
    total_checkins: int = 0
    currency_balance: int = 0
    total_currency_earned: int = 0
    has_loyalty_badge: bool = False
    loyal_since: date | None = None


@dataclass(frozen=True)
class NextMilestone:
    """Progress toward the next configured milestone."""

    days_required: int
    days_remaining: int
    reward: MilestoneReward


@dataclass(frozen=True)
class RewardResult:
    """Reward descriptor for one successful check-in."""

    currency_awarded: int
    is_milestone: bool
    milestone_kind: MilestoneKind | None
    milestone_label: str | None
    streak_after: int
    next_milestone: NextMilestone | None
    streak_broken: bool = False
    loyalty_badge_granted: bool = False


@dataclass(frozen=True)
class CheckinOutcome:
    """Result of evaluate_checkin."""

    updated_record: CheckinRecord
    reward: RewardResult | None
    already_checked_in: bool


@dataclass(frozen=True)
class CheckinStatus:
    """Read-only view used to render the claim button."""

    can_check_in_today: bool
    next_eligible_date: date | None
    effective_streak: int
    next_milestone: NextMilestone | None


# =============================================================================
# Validation
# =============================================================================


_COUNTERS = (
    "current_streak",
    "total_checkins",
    "currency_balance",
    "total_currency_earned",
)


def validate_record(record: CheckinRecord) -> None:
    """Fail fast on a structurally corrupt record.

    Raises:
        InvalidRecordError: On the first violated invariant
    """
    for field in _COUNTERS:
        value = getattr(record, field)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidRecordError(field, value, "must be an integer")
        if value < 0:
            raise InvalidRecordError(field, value, "must be non-negative")

    if record.last_checkin_date is None:
        if record.current_streak != 0:
            raise InvalidRecordError(
                "current_streak",
                record.current_streak,
                "must be 0 when there is no previous check-in",
            )
    else:
        if record.current_streak < 1:
            raise InvalidRecordError(
                "current_streak",
                record.current_streak,
                "must be at least 1 after a check-in",
            )
        if record.total_checkins < 1:
            raise InvalidRecordError(
                "total_checkins",
                record.total_checkins,
                "must be at least 1 after a check-in",
            )

    if record.loyal_since is not None and not record.has_loyalty_badge:
        raise InvalidRecordError(
            "loyal_since",
            record.loyal_since,
            "set without has_loyalty_badge",
        )


# =============================================================================
# Operations
# =============================================================================


def new_record(initial_currency_balance: int = 0) -> CheckinRecord:
    """Seed record for a user who has never checked in."""
    record = CheckinRecord(currency_balance=initial_currency_balance)
    validate_record(record)
    return record


def get_next_milestone(streak: int, milestones: MilestoneTable) -> NextMilestone | None:
    """Smallest milestone strictly beyond streak, or None past the last one."""
    found = milestones.next_after(streak)
    if found is None:
        return None
    day, reward = found
    return NextMilestone(
        days_required=day,
        days_remaining=day - streak,
        reward=reward,
    )


def evaluate_checkin(
    record: CheckinRecord,
    today: date,
    milestones: MilestoneTable,
) -> CheckinOutcome:
    """Apply one check-in attempt for today.

    A second attempt on the same date is a normal outcome
    (already_checked_in=True, record unchanged), not an error.

    Raises:
        InvalidRecordError: If the input record is corrupt
        ClockRegressionError: If today precedes last_checkin_date
    """
    validate_record(record)
    last = record.last_checkin_date

    if last is not None and last == today:
        return CheckinOutcome(
            updated_record=record,
            reward=None,
            already_checked_in=True,
        )

    streak_broken = False
    if last is None:
        new_streak = 1
    else:
        days_since_last = (today - last).days
        if days_since_last < 0:
            raise ClockRegressionError(today=today, last_checkin_date=last)
        if days_since_last == 1:
            new_streak = record.current_streak + 1
        else:
            new_streak = 1
            streak_broken = True

    milestone = milestones.get(new_streak)
    currency_awarded = 0
    if milestone is not None and milestone.kind is MilestoneKind.CURRENCY:
        currency_awarded = milestone.currency_amount

    threshold = milestones.loyalty_threshold
    reaches_loyalty = threshold is not None and new_streak >= threshold
    badge_granted = reaches_loyalty and not record.has_loyalty_badge

    updated = replace(
        record,
        last_checkin_date=today,
        current_streak=new_streak,
        total_checkins=record.total_checkins + 1,
        currency_balance=record.currency_balance + currency_awarded,
        total_currency_earned=record.total_currency_earned + currency_awarded,
        has_loyalty_badge=record.has_loyalty_badge or reaches_loyalty,
        loyal_since=today if badge_granted else record.loyal_since,
    )

    reward = RewardResult(
        currency_awarded=currency_awarded,
        is_milestone=milestone is not None,
        milestone_kind=milestone.kind if milestone else None,
        milestone_label=milestone.label if milestone else None,
        streak_after=new_streak,
        next_milestone=get_next_milestone(new_streak, milestones),
        streak_broken=streak_broken,
        loyalty_badge_granted=badge_granted,
    )

    return CheckinOutcome(
        updated_record=updated,
        reward=reward,
        already_checked_in=False,
    )


def get_status(
    record: CheckinRecord,
    today: date,
    milestones: MilestoneTable,
) -> CheckinStatus:
    """Whether a check-in is possible today, without attempting one."""
    last = record.last_checkin_date
    can_check_in = last != today

    # What the counter shows if the user does not check in again
    if last is not None and 0 <= (today - last).days <= 1:
        effective_streak = record.current_streak
    else:
        effective_streak = 0

    return CheckinStatus(
        can_check_in_today=can_check_in,
        next_eligible_date=None if can_check_in else today + timedelta(days=1),
        effective_streak=effective_streak,
        next_milestone=get_next_milestone(effective_streak, milestones),
    )


def format_currency(amount: int) -> str:
    """Compact display: 1500 -> "1.5K", 2500000 -> "2.5M", 999 -> "999".

    One decimal place, rounded half-up on the exact quotient.
    """
    if amount >= 1_000_000:
        value, suffix = Decimal(amount) / Decimal(1_000_000), "M"
    elif amount >= 1_000:
        value, suffix = Decimal(amount) / Decimal(1_000), "K"
    else:
        return str(amount)
    return f"{value.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}{suffix}"
