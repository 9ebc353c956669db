"""Daily check-in streak engine (pure, no I/O)."""

from app.engine.milestones import (
    MilestoneKind,
    MilestoneReward,
    MilestoneTable,
    build_milestone_table,
    reference_milestones,
)
from app.engine.streak import (
    CheckinOutcome,
    CheckinRecord,
    CheckinStatus,
    NextMilestone,
    RewardResult,
    evaluate_checkin,
    format_currency,
    get_next_milestone,
    get_status,
    new_record,
    validate_record,
)

__all__ = [
    # Milestones
    "MilestoneKind",
    "MilestoneReward",
    "MilestoneTable",
    "build_milestone_table",
    "reference_milestones",
    # Streak
    "CheckinRecord",
    "CheckinOutcome",
    "CheckinStatus",
    "NextMilestone",
    "RewardResult",
    "evaluate_checkin",
    "get_status",
    "get_next_milestone",
    "format_currency",
    "new_record",
    "validate_record",
]
