"""Pytest fixtures for backend tests."""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient


def _set_default_env() -> None:
    os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
    os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-key")
    os.environ.setdefault("ENABLE_SCHEDULER", "false")
    os.environ.setdefault("JWT_SECRET", "test-secret")
    os.environ.setdefault("SOLANA_NETWORK", "devnet")


# Settings are read at import time, so the environment must be ready first.
_set_default_env()

from fakes import FakeLedgerOracle, FakeSupabase  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a FastAPI test client."""
    from app.main import app

    return TestClient(app)


@pytest.fixture
def fake_db() -> FakeSupabase:
    """Empty in-memory database."""
    return FakeSupabase()


@pytest.fixture
def fake_oracle() -> FakeLedgerOracle:
    """Ledger oracle that confirms every signature unless told otherwise."""
    return FakeLedgerOracle()


@pytest.fixture
def api_client(fake_db: FakeSupabase, fake_oracle: FakeLedgerOracle, monkeypatch):
    """Test client running the full lifespan against the in-memory fakes."""
    from app import main
    from app.dependencies import get_db_client, get_ledger_oracle

    async def _fake_service_client() -> FakeSupabase:
        return fake_db

    monkeypatch.setattr(main, "get_service_client", _fake_service_client)
    main.app.dependency_overrides[get_db_client] = lambda: fake_db
    main.app.dependency_overrides[get_ledger_oracle] = lambda: fake_oracle
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture
def admin_cookie() -> dict[str, str]:
    """Session cookie for an admin wallet."""
    from app.config import settings
    from app.services.auth_service import ROLE_ADMIN, create_access_token

    token = create_access_token(1, ROLE_ADMIN, "AdminWa11et1111111111111111111111111")
    return {settings.auth_cookie_name: token}
