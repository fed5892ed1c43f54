"""Shared fixtures for SonicStream tests."""

import pytest

import sonicstream.core.database as db_module


@pytest.fixture
def test_db(tmp_path, monkeypatch):
    """Point the song catalog at an empty temporary database."""
    db_path = tmp_path / "sonicstream.db"
    monkeypatch.setattr(db_module, "get_database_path", lambda: db_path)
    db_module.init_database()
    yield db_path
