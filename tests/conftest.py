import os
import tempfile

# Must be set before anything imports app.core.config / app.core.database
_DB_DIR = tempfile.mkdtemp(prefix="traitors-fantasy-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["COMMISSIONER_KEY"] = "test-commissioner-key"
os.environ["DEFAULT_RULE_PACK_ID"] = "traitors-classic"

import pytest
from fastapi.testclient import TestClient

from app.schemas.game_state import CastMemberStatus, PlayerEntry, SeasonState

COMMISSIONER_HEADERS = {"X-Commissioner-Key": "test-commissioner-key"}


@pytest.fixture
def status():
    """Build a CastMemberStatus from flag names: status("winner", "traitor")."""
    def _status(*flags: str) -> CastMemberStatus:
        return CastMemberStatus(**{f"is_{flag}": True for flag in flags})
    return _status


@pytest.fixture
def make_player():
    def _make(**overrides) -> PlayerEntry:
        data = {"id": "test-player-1", "name": "Test Player", "email": "test@example.com"}
        data.update(overrides)
        return PlayerEntry(**data)
    return _make


@pytest.fixture
def make_state():
    def _make(**overrides) -> SeasonState:
        data = {"cast_status": {}, "weekly_results": {}}
        data.update(overrides)
        return SeasonState(**data)
    return _make


@pytest.fixture
def commissioner_headers():
    return dict(COMMISSIONER_HEADERS)


@pytest.fixture
def client():
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
