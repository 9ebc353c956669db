"""Test fixtures for API tests."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_checkin_service
from app.config import Settings
from app.main import app
from app.services.checkin import CheckinService


def get_test_settings() -> Settings:
    """Get test-specific settings."""
    return Settings(
        app_env="test",
        app_debug=False,
        checkin_timezone="UTC",
        checkin_initial_currency_balance=200,
    )


@pytest.fixture
def checkin_service(db, redis, clock, fake_repo) -> CheckinService:
    service = CheckinService(db, redis, get_test_settings(), clock=clock)
    service.repo = fake_repo
    return service


@pytest_asyncio.fixture(scope="function")
async def test_client(checkin_service) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the application with the service overridden."""
    app.dependency_overrides[get_checkin_service] = lambda: checkin_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-User-Id": "user-1"}
