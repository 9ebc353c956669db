"""API routers."""

from app.api.checkin import router as checkin_router

__all__ = [
    "checkin_router",
]
