"""Tests for orjson response rendering."""

from datetime import date, datetime, timezone
from decimal import Decimal

import orjson

from app.engine.milestones import MilestoneKind
from app.utils.json_utils import ORJSONResponse


def test_renders_dates_and_enums():
    response = ORJSONResponse(
        content={
            "date": date(2024, 1, 2),
            "checkedAt": datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
            "kind": MilestoneKind.LOYALTY_BADGE,
            "amount": Decimal("1.50"),
        }
    )

    assert orjson.loads(response.body) == {
        "date": "2024-01-02",
        "checkedAt": "2024-01-02T03:04:05Z",
        "kind": "loyalty_badge",
        "amount": "1.50",
    }
    assert response.media_type == "application/json"
