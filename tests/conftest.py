import httpx
import pytest
from httpx import ASGITransport


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("TRAVEL_API_URL", "https://travelapi.test")
    monkeypatch.setenv("SUPABASE_URL", "https://db.test")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")
    monkeypatch.setenv("RETRY_DELAY", "0")
    monkeypatch.setenv("DESTINATION_RETRY_DELAY", "0")
    monkeypatch.setenv("REQUEST_TIMEOUT", "5")
    monkeypatch.setenv("WARMUP_TIMEOUT", "5")


@pytest.fixture
async def client(mock_env):
    from app.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
