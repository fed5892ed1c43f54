"""Pytest configuration for backend tests."""

import sys
from pathlib import Path

import pytest
import sse_starlette.sse as sse_module
from fastapi.testclient import TestClient

# Add project root to path
project_root = Path(__file__).parent.parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import sonicstream.core.database as db_module
from sonicstream.core.config import Config
from web.backend.deps import get_config
from web.backend.main import app


@pytest.fixture(autouse=True)
def reset_sse_exit_event():
    """sse-starlette caches an exit event bound to the first test's event loop."""
    if hasattr(sse_module, "AppStatus"):
        sse_module.AppStatus.should_exit_event = None
    yield
    if hasattr(sse_module, "AppStatus"):
        sse_module.AppStatus.should_exit_event = None


@pytest.fixture
def test_config():
    config = Config()
    app.dependency_overrides[get_config] = lambda: config
    yield config
    app.dependency_overrides.clear()


@pytest.fixture
def client(test_config):
    return TestClient(app)


@pytest.fixture
def test_db(tmp_path, monkeypatch):
    """Point the song catalog at an empty temporary database."""
    db_path = tmp_path / "sonicstream.db"
    monkeypatch.setattr(db_module, "get_database_path", lambda: db_path)
    db_module.init_database()
    yield db_path
