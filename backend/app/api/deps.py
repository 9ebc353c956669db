"""API dependencies for user identity and services."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.logging_config import bind_context
from app.services.checkin import CheckinService
from app.utils.db import get_db
from app.utils.errors import MissingUserError
from app.utils.redis_client import get_redis, init_redis


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """User identity forwarded by the authenticating gateway.

    Raises:
        MissingUserError: If the header is absent or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise MissingUserError()
    user_id = x_user_id.strip()
    bind_context(user_id=user_id)
    return user_id


async def get_checkin_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CheckinService:
    """Build a CheckinService bound to the request's session."""
    redis = get_redis()
    if redis is None:
        redis = await init_redis()
    return CheckinService(db, redis, settings)


# Type aliases for cleaner dependency injection
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
CheckinServiceDep = Annotated[CheckinService, Depends(get_checkin_service)]
