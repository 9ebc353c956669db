"""FastAPI application entry point.

Style check-in API: daily check-in, streak and milestone rewards.
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from starlette.middleware.base import BaseHTTPMiddleware

from app.api import checkin
from app.config import get_settings
from app.logging_config import bind_context, clear_context, configure_logging, get_logger
from app.utils.db import close_db, engine, init_db
from app.utils.errors import CheckinError, ErrorCode
from app.utils.json_utils import ORJSONResponse
from app.utils.redis_client import close_redis, get_redis, init_redis

settings = get_settings()

configure_logging(
    log_level=settings.log_level,
    json_logs=settings.app_env == "production",
    app_env=settings.app_env,
)
logger = get_logger(__name__)


# =============================================================================
# Lifespan Events
# =============================================================================


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting application...")

    try:
        await init_db()
        logger.info("Database connection established")

        await init_redis()
        logger.info("Redis connection established")

        logger.info(
            "checkin_config_loaded",
            timezone=settings.checkin_timezone,
            milestones=list(settings.milestone_table.days),
        )
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("Shutting down application...")
    try:
        await close_db()
        await close_redis()
        logger.info("Application shutdown complete")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title="Style Check-in API",
    version="1.0.0",
    description="Daily check-in, streak and milestone reward service",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)


# =============================================================================
# Middleware
# =============================================================================


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach X-Request-ID to every request, response and log line."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = datetime.now(timezone.utc)

        clear_context()
        bind_context(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            clear_context()

        response.headers["X-Request-ID"] = request_id

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=round(duration, 3),
            request_id=request_id,
        )
        return response


app.add_middleware(RequestIDMiddleware)

cors_origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID", "X-User-Id"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# Error Handlers
# =============================================================================


def get_request_id(request: Request) -> str:
    """Get request ID from request state or headers."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("X-Request-ID", str(uuid.uuid4()))


def create_error_response(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    trace_id: str | None = None,
) -> dict[str, Any]:
    """Create standardized error response."""
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        },
        "traceId": trace_id,
    }


@app.exception_handler(CheckinError)
async def checkin_error_handler(request: Request, exc: CheckinError) -> ORJSONResponse:
    """Handle check-in errors.

    Non-recoverable errors point at a caller or data fault; the client only
    gets a generic retry message and the details go to the log.
    """
    trace_id = get_request_id(request)

    if exc.code == ErrorCode.UNAUTHORIZED.value:
        status_code = status.HTTP_401_UNAUTHORIZED
    elif exc.code == ErrorCode.CHECKIN_IN_PROGRESS.value:
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if exc.recoverable or status_code != status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.warning("checkin_error", code=exc.code, message=exc.message, trace_id=trace_id)
        content = create_error_response(
            code=exc.code,
            message=exc.message,
            trace_id=trace_id,
        )
    else:
        logger.error("checkin_failure", trace_id=trace_id, **exc.to_dict())
        content = create_error_response(
            code=exc.code,
            message="Check-in is temporarily unavailable, please try again later",
            trace_id=trace_id,
        )

    return ORJSONResponse(status_code=status_code, content=content)


@app.exception_handler(HTTPException)
async def http_exception_handler(
    request: Request, exc: HTTPException
) -> ORJSONResponse:
    """Handle HTTP exceptions."""
    trace_id = get_request_id(request)
    return ORJSONResponse(
        status_code=exc.status_code,
        content=create_error_response(
            code="HTTP_ERROR",
            message=str(exc.detail),
            trace_id=trace_id,
        ),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Handle unexpected exceptions."""
    trace_id = get_request_id(request)

    logger.error(
        "unexpected_error",
        error_type=type(exc).__name__,
        error_message=str(exc),
        trace_id=trace_id,
        exc_info=True,
    )

    # Don't expose internal error details in production
    message = "Internal server error"
    if settings.app_debug:
        message = f"{type(exc).__name__}: {exc}"

    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_response(
            code=ErrorCode.INTERNAL_ERROR.value,
            message=message,
            trace_id=trace_id,
        ),
    )


# =============================================================================
# Health Check Endpoints
# =============================================================================


@app.get("/health/live", tags=["Health"], summary="Liveness probe")
async def liveness_probe() -> dict[str, str]:
    """Liveness probe: the process is running."""
    return {"status": "alive"}


@app.get("/health/ready", tags=["Health"], summary="Readiness probe")
async def readiness_probe():
    """Readiness probe: database and Redis answer."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        current_redis = get_redis()
        if current_redis is None:
            raise RuntimeError("Redis not initialized")
        await current_redis.ping()

        return {"status": "ready"}
    except Exception as e:
        logger.error("readiness_probe_failed", error=str(e))
        return ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not ready", "error": str(e)},
        )


# =============================================================================
# API Routers
# =============================================================================


app.include_router(checkin.router, prefix="/api/v1")


def run() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    import uvicorn

    if settings.app_debug:
        # Development: single worker with reload
        uvicorn.run(
            "app.main:app",
            host=settings.app_host,
            port=settings.app_port,
            reload=True,
            log_level=settings.log_level.lower(),
        )
    else:
        uvicorn.run(
            "app.main:app",
            host=settings.app_host,
            port=settings.app_port,
            workers=settings.uvicorn_workers,
            log_level=settings.log_level.lower(),
            access_log=True,
            timeout_keep_alive=5,
        )


if __name__ == "__main__":
    run()
