# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
import os
import shutil
import sys
import tempfile
import logging

# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# --- Point the app at a throwaway database before anything imports settings ---
TEST_DB_DIR = tempfile.mkdtemp(prefix="brainquest_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(TEST_DB_DIR, 'test.db')}"

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from brainquest.services import session_registry


class FakeClock:
    """Manually advanced stand-in for ``time.monotonic``."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# --- TestClient Fixture ---
@pytest.fixture(scope="session")
def client():
    """
    Creates the TestClient once; app startup creates the tables and loads the
    template banks.
    """
    from brainquest.main import app
    logger.info(f"Creating TestClient instance for the session (database in {TEST_DB_DIR}).")
    with TestClient(app) as c:
        yield c
    shutil.rmtree(TEST_DB_DIR, ignore_errors=True)


# --- State Reset Fixture ---
@pytest.fixture(autouse=True)
def reset_live_sessions():
    session_registry.clear()
    yield
    session_registry.clear()
