"""Tests for milestone table construction."""

import pytest

from app.engine.milestones import (
    MilestoneKind,
    MilestoneReward,
    build_milestone_table,
    reference_milestones,
)


class TestReferenceMilestones:
    """The reference configuration."""

    def test_days_sorted(self):
        assert reference_milestones().days == (7, 14, 28, 40)

    def test_rewards(self):
        table = reference_milestones()

        assert table.get(7).currency_amount == 200
        assert table.get(14).currency_amount == 250
        assert table.get(28).currency_amount == 300
        assert table.get(40).kind is MilestoneKind.LOYALTY_BADGE
        assert table.get(40).currency_amount == 0

    def test_loyalty_threshold(self):
        assert reference_milestones().loyalty_threshold == 40

    def test_exact_lookup_only(self):
        table = reference_milestones()

        assert table.get(8) is None
        assert table.get(0) is None

    def test_next_after(self):
        table = reference_milestones()

        assert table.next_after(0)[0] == 7
        assert table.next_after(7)[0] == 14
        assert table.next_after(39)[0] == 40
        assert table.next_after(40) is None


class TestBuildMilestoneTable:
    """Validation of configuration data."""

    def test_string_keys_from_json(self):
        table = build_milestone_table({"10": {"currency_amount": 5, "kind": "currency", "label": "Ten"}})

        assert table.get(10) == MilestoneReward(5, MilestoneKind.CURRENCY, "Ten")

    def test_default_label_and_kind(self):
        table = build_milestone_table({3: {"currency_amount": 1}})

        assert table.get(3).label == "3-Day Streak!"
        assert table.get(3).kind is MilestoneKind.CURRENCY

    def test_accepts_reward_objects(self):
        reward = MilestoneReward(0, MilestoneKind.LOYALTY_BADGE, "Loyal")

        assert build_milestone_table({30: reward}).loyalty_threshold == 30

    def test_unsorted_input_sorted(self):
        table = build_milestone_table({
            20: {"currency_amount": 2},
            5: {"currency_amount": 1},
        })

        assert table.days == (5, 20)
        assert len(table) == 2

    def test_empty_table(self):
        table = build_milestone_table({})

        assert table.next_after(0) is None
        assert table.loyalty_threshold is None

    @pytest.mark.parametrize(
        "mapping",
        [
            {0: {"currency_amount": 1}},
            {-3: {"currency_amount": 1}},
            {"abc": {"currency_amount": 1}},
            {5: {"currency_amount": -1}},
            {5: {"currency_amount": "100"}},
            {5: {"currency_amount": 1, "kind": "gems"}},
            {5: {"currency_amount": 10, "kind": "loyalty_badge"}},
            {"5": {"currency_amount": 1}, 5: {"currency_amount": 2}},
            {7: 200},
            {7: [200, "currency"]},
        ],
    )
    def test_invalid_configuration(self, mapping):
        with pytest.raises(ValueError):
            build_milestone_table(mapping)

    def test_to_dict(self):
        assert reference_milestones().get(7).to_dict() == {
            "currency_amount": 200,
            "kind": "currency",
            "label": "7-Day Streak!",
        }
