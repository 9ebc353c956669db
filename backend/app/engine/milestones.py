"""Streak milestone table.

A milestone table maps an exact streak length (in days) to a one-time
reward. Tables are built once from configuration data and never mutated.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class MilestoneKind(str, Enum):
    """Reward granted when a milestone is reached."""

    CURRENCY = "currency"
    LOYALTY_BADGE = "loyalty_badge"


@dataclass(frozen=True)
class MilestoneReward:
    """Reward descriptor for one milestone."""

    currency_amount: int
    kind: MilestoneKind
    label: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency_amount": self.currency_amount,
            "kind": self.kind.value,
            "label": self.label,
        }


@dataclass(frozen=True)
class MilestoneTable:
    """Immutable, ordered mapping of streak day count to reward.

    Entries are kept sorted by day count so next-milestone lookups can scan
    in order.
    """

    entries: tuple[tuple[int, MilestoneReward], ...]

    def get(self, day_count: int) -> MilestoneReward | None:
        """Return the reward for an exact day count, if configured."""
        for day, reward in self.entries:
            if day == day_count:
                return reward
        return None

    def next_after(self, streak: int) -> tuple[int, MilestoneReward] | None:
        """Return the first milestone strictly greater than streak."""
        for day, reward in self.entries:
            if day > streak:
                return day, reward
        return None

    @property
    def loyalty_threshold(self) -> int | None:
        """Smallest day count that grants the loyalty badge."""
        for day, reward in self.entries:
            if reward.kind is MilestoneKind.LOYALTY_BADGE:
                return day
        return None

    @property
    def days(self) -> tuple[int, ...]:
        return tuple(day for day, _ in self.entries)

    def __iter__(self) -> Iterator[tuple[int, MilestoneReward]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


# Reference configuration
REFERENCE_MILESTONES: dict[int, dict[str, Any]] = {
    7: {"currency_amount": 200, "kind": "currency", "label": "7-Day Streak!"},
    14: {"currency_amount": 250, "kind": "currency", "label": "14-Day Streak!"},
    28: {"currency_amount": 300, "kind": "currency", "label": "28-Day Streak!"},
    40: {
        "currency_amount": 0,
        "kind": "loyalty_badge",
        "label": "Loyalty Badge Unlocked!",
    },
}


def _parse_reward(day: int, raw: Mapping[str, Any] | MilestoneReward) -> MilestoneReward:
    if isinstance(raw, MilestoneReward):
        reward = raw
    elif not isinstance(raw, Mapping):
        raise ValueError(f"Milestone {day}: expected a mapping, got {type(raw).__name__}")
    else:
        try:
            kind = MilestoneKind(raw.get("kind", MilestoneKind.CURRENCY.value))
        except ValueError as e:
            raise ValueError(f"Milestone {day}: unknown kind {raw.get('kind')!r}") from e
        amount = raw.get("currency_amount", 0)
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValueError(f"Milestone {day}: currency_amount must be an integer")
        reward = MilestoneReward(
            currency_amount=amount,
            kind=kind,
            label=str(raw.get("label") or f"{day}-Day Streak!"),
        )

    if reward.currency_amount < 0:
        raise ValueError(f"Milestone {day}: currency_amount must be >= 0")
    if reward.kind is MilestoneKind.LOYALTY_BADGE and reward.currency_amount != 0:
        raise ValueError(f"Milestone {day}: loyalty badge milestones carry no currency")
    return reward


def build_milestone_table(
    mapping: Mapping[Any, Mapping[str, Any] | MilestoneReward],
) -> MilestoneTable:
    """Build a validated table from configuration data.

    Keys may be ints or numeric strings (JSON object keys arrive as strings).

    Raises:
        ValueError: On a non-positive or duplicate day count, an entry that
            is not a mapping, a negative amount, an unknown kind, or a badge
            milestone carrying currency.
    """
    parsed: dict[int, MilestoneReward] = {}
    for key, raw in mapping.items():
        try:
            day = int(key)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Milestone day must be an integer: {key!r}") from e
        if day <= 0:
            raise ValueError(f"Milestone day must be positive: {day}")
        if day in parsed:
            raise ValueError(f"Duplicate milestone day: {day}")
        parsed[day] = _parse_reward(day, raw)

    return MilestoneTable(entries=tuple(sorted(parsed.items())))


def reference_milestones() -> MilestoneTable:
    """{7: +200, 14: +250, 28: +300, 40: loyalty badge}"""
    return build_milestone_table(REFERENCE_MILESTONES)
