# tests/conftest.py
import os
from datetime import datetime
from pathlib import Path

# Configure the test database before any rollcall module builds the engine.
TEST_DB_PATH = Path(__file__).resolve().parent / "rollcall_test.db"
os.environ["APP_ENV"] = "test"
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ.pop("INTERNAL_API_KEY", None)

if TEST_DB_PATH.exists():
    TEST_DB_PATH.unlink()

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from rollcall.api.dependencies.clock import get_now  # noqa: E402
from rollcall.main import create_app  # noqa: E402


@pytest.fixture(scope="session")
def app():
    return create_app()


@pytest.fixture(scope="session")
def client(app) -> TestClient:
    """
    Shared TestClient fixture for all tests.

    Entering the client runs the lifespan, which creates the schema.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def freeze_now(app):
    """
    Pin the organization clock seen by the API.

    Usage: `freeze_now(datetime(2025, 3, 1, 9, 30))`. The override is removed
    after the test.
    """

    def _freeze(instant: datetime) -> datetime:
        app.dependency_overrides[get_now] = lambda: instant
        return instant

    yield _freeze
    app.dependency_overrides.pop(get_now, None)
