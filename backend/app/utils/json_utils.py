"""JSON rendering using orjson.

Usage:
    from app.utils.json_utils import ORJSONResponse

    return ORJSONResponse(content={"status": "ok"})
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any

import orjson
from fastapi.responses import JSONResponse


def _default_serializer(obj: Any) -> Any:
    """Custom serializer for types not natively supported by orjson."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class ORJSONResponse(JSONResponse):
    """FastAPI response class using orjson for serialization."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        """Render content to JSON bytes."""
        return orjson.dumps(
            content,
            default=_default_serializer,
            option=orjson.OPT_UTC_Z,
        )
