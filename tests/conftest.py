from __future__ import annotations

from pathlib import Path

import pytest

from bookshelf.config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point the store at a per-test SQLite file and reset cached settings."""
    monkeypatch.setenv("BOOKSHELF_DB_PATH", str(tmp_path / "bookshelf.db"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "store.db"
