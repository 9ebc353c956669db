"""Daily check-in API."""

from datetime import date, datetime

from fastapi import APIRouter, Query
from pydantic import BaseModel, ConfigDict, Field

from app.api.deps import CheckinServiceDep, CurrentUserId
from app.engine.milestones import MilestoneReward
from app.engine.streak import NextMilestone, format_currency

router = APIRouter(prefix="/checkin", tags=["Checkin"])


# ============================================================================
# Response Models
# ============================================================================


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class MilestoneRewardResponse(CamelModel):
    currency_amount: int = Field(..., alias="currencyAmount")
    kind: str
    label: str

    @classmethod
    def from_reward(cls, reward: MilestoneReward) -> "MilestoneRewardResponse":
        return cls(
            currency_amount=reward.currency_amount,
            kind=reward.kind.value,
            label=reward.label,
        )


class NextMilestoneResponse(CamelModel):
    days_required: int = Field(..., alias="daysRequired")
    days_remaining: int = Field(..., alias="daysRemaining")
    reward: MilestoneRewardResponse

    @classmethod
    def from_next(cls, nxt: NextMilestone | None) -> "NextMilestoneResponse | None":
        if nxt is None:
            return None
        return cls(
            days_required=nxt.days_required,
            days_remaining=nxt.days_remaining,
            reward=MilestoneRewardResponse.from_reward(nxt.reward),
        )


class CheckinResponse(CamelModel):
    """Check-in result"""

    already_checked_in: bool = Field(..., alias="alreadyCheckedIn")
    current_streak: int = Field(..., alias="currentStreak")
    currency_awarded: int = Field(0, alias="currencyAwarded")
    is_milestone: bool = Field(False, alias="isMilestone")
    milestone_kind: str | None = Field(None, alias="milestoneKind")
    milestone_label: str | None = Field(None, alias="milestoneLabel")
    streak_broken: bool = Field(False, alias="streakBroken")
    loyalty_badge_granted: bool = Field(False, alias="loyaltyBadgeGranted")
    next_milestone: NextMilestoneResponse | None = Field(None, alias="nextMilestone")
    currency_balance: int = Field(..., alias="currencyBalance")
    currency_balance_display: str = Field(..., alias="currencyBalanceDisplay")
    has_loyalty_badge: bool = Field(..., alias="hasLoyaltyBadge")


class MonthlyCheckin(CamelModel):
    checkin_date: date = Field(..., alias="date")
    streak_days: int = Field(..., alias="streakDays")
    reward: int
    reward_type: str = Field(..., alias="rewardType")


class CheckinStatusResponse(CamelModel):
    """Check-in status"""

    can_check_in_today: bool = Field(..., alias="canCheckInToday")
    next_eligible_date: date | None = Field(None, alias="nextEligibleDate")
    current_streak: int = Field(..., alias="currentStreak")
    effective_streak: int = Field(..., alias="effectiveStreak")
    total_checkins: int = Field(..., alias="totalCheckins")
    currency_balance: int = Field(..., alias="currencyBalance")
    currency_balance_display: str = Field(..., alias="currencyBalanceDisplay")
    total_currency_earned: int = Field(..., alias="totalCurrencyEarned")
    has_loyalty_badge: bool = Field(..., alias="hasLoyaltyBadge")
    loyal_since: date | None = Field(None, alias="loyalSince")
    next_milestone: NextMilestoneResponse | None = Field(None, alias="nextMilestone")
    monthly_checkins: list[MonthlyCheckin] = Field(default_factory=list, alias="monthlyCheckins")


class CheckinHistoryItem(CamelModel):
    checkin_date: date = Field(..., alias="date")
    streak_days: int = Field(..., alias="streakDays")
    reward_amount: int = Field(..., alias="rewardAmount")
    reward_type: str = Field(..., alias="rewardType")
    milestone_label: str | None = Field(None, alias="milestoneLabel")
    streak_broken: bool = Field(False, alias="streakBroken")
    checked_at: datetime = Field(..., alias="checkedAt")


class CheckinHistoryResponse(BaseModel):
    items: list[CheckinHistoryItem]


class MilestoneEntry(CamelModel):
    days: int
    reward: MilestoneRewardResponse


class MilestoneListResponse(BaseModel):
    items: list[MilestoneEntry]


# ============================================================================
# API Endpoints
# ============================================================================


@router.post("", response_model=CheckinResponse)
async def do_checkin(user_id: CurrentUserId, service: CheckinServiceDep):
    """Check in for today

    - At most once per calendar day (configured timezone)
    - Repeating the call the same day returns alreadyCheckedIn=true
    - Milestone rewards only on the exact streak day
    """
    outcome = await service.check_in(user_id)
    record = outcome.updated_record
    reward = outcome.reward

    reward_fields = {}
    if reward is not None:
        reward_fields = {
            "currency_awarded": reward.currency_awarded,
            "is_milestone": reward.is_milestone,
            "milestone_kind": reward.milestone_kind.value if reward.milestone_kind else None,
            "milestone_label": reward.milestone_label,
            "streak_broken": reward.streak_broken,
            "loyalty_badge_granted": reward.loyalty_badge_granted,
            "next_milestone": NextMilestoneResponse.from_next(reward.next_milestone),
        }

    return CheckinResponse(
        already_checked_in=outcome.already_checked_in,
        current_streak=record.current_streak,
        currency_balance=record.currency_balance,
        currency_balance_display=format_currency(record.currency_balance),
        has_loyalty_badge=record.has_loyalty_badge,
        **reward_fields,
    )


@router.get("/status", response_model=CheckinStatusResponse)
async def get_checkin_status(user_id: CurrentUserId, service: CheckinServiceDep):
    """Check-in status

    - Whether a check-in is possible today
    - Current and effective streak
    - This month's check-ins
    - Distance to the next milestone
    """
    today = service.today()
    record, status = await service.get_status(user_id, today)
    monthly = await service.get_monthly_checkins(user_id, today)

    return CheckinStatusResponse(
        can_check_in_today=status.can_check_in_today,
        next_eligible_date=status.next_eligible_date,
        current_streak=record.current_streak,
        effective_streak=status.effective_streak,
        total_checkins=record.total_checkins,
        currency_balance=record.currency_balance,
        currency_balance_display=format_currency(record.currency_balance),
        total_currency_earned=record.total_currency_earned,
        has_loyalty_badge=record.has_loyalty_badge,
        loyal_since=record.loyal_since,
        next_milestone=NextMilestoneResponse.from_next(status.next_milestone),
        monthly_checkins=[
            MonthlyCheckin(
                checkin_date=c.checkin_date,
                streak_days=c.streak_days,
                reward=c.reward_amount,
                reward_type=c.reward_type,
            )
            for c in monthly
        ],
    )


@router.get("/history", response_model=CheckinHistoryResponse)
async def get_checkin_history(
    user_id: CurrentUserId,
    service: CheckinServiceDep,
    limit: int = Query(30, ge=1, le=100),
):
    """Check-in history, newest first"""
    checkins = await service.get_history(user_id, limit)
    return CheckinHistoryResponse(
        items=[
            CheckinHistoryItem(
                checkin_date=c.checkin_date,
                streak_days=c.streak_days,
                reward_amount=c.reward_amount,
                reward_type=c.reward_type,
                milestone_label=c.milestone_label,
                streak_broken=c.streak_broken,
                checked_at=c.checked_at,
            )
            for c in checkins
        ]
    )


@router.get("/milestones", response_model=MilestoneListResponse)
async def list_milestones(service: CheckinServiceDep):
    """Configured streak milestones"""
    return MilestoneListResponse(
        items=[
            MilestoneEntry(days=day, reward=MilestoneRewardResponse.from_reward(reward))
            for day, reward in service.milestones
        ]
    )
