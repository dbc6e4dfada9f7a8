import json
import logging
from pathlib import Path

from bookshelf.config import DEFAULT_DB, Settings, get_settings
from bookshelf.logging_config import JsonFormatter, configure_logging


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("BOOKSHELF_DB_PATH", raising=False)
    settings = Settings(_env_file=None)
    assert settings.db_path == DEFAULT_DB
    assert settings.log_level == "INFO"
    assert settings.log_format == "plain"
    assert settings.shelf_seed_count == 20
    assert settings.transaction_seed_count == 15


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("BOOKSHELF_DB_PATH", str(tmp_path / "x.db"))
    monkeypatch.setenv("BOOKSHELF_LOG_FORMAT", "json")
    get_settings.cache_clear()
    settings = get_settings()
    assert settings.db_path == Path(tmp_path / "x.db")
    assert settings.log_format == "json"
    assert get_settings() is settings


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="bookshelf.storage",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="seeded %s",
        args=("bookshelfBooks",),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_emits_expected_fields():
    payload = json.loads(JsonFormatter().format(_record(count=20)))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "bookshelf.storage"
    assert payload["message"] == "seeded bookshelfBooks"
    assert payload["count"] == 20
    assert "timestamp" in payload
    assert "pathname" not in payload


def test_configure_logging_formats():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging(level="DEBUG", output_format="plain")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)

        configure_logging(level="warning", output_format="json")
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
