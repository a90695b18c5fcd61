from __future__ import annotations

import json
import logging

from src.todo_api.logging_setup import _json_formatter
from src.todo_api.settings import get_settings


def test_settings_defaults(monkeypatch):
    for name in ("PERSISTENCE_BACKEND", "SQLITE_DB_PATH", "CORS_ALLOW_ORIGINS", "LOG_LEVEL", "LOG_JSON"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.persistence_backend == "memory"
    assert settings.sqlite_db_path == "./data/todos.db"
    assert settings.cors_allow_origins == ["http://localhost:4200"]
    assert settings.log_level == "INFO"
    assert settings.log_json is False


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "SQLite")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test ,")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_JSON", "yes")

    settings = get_settings()

    assert settings.persistence_backend == "sqlite"
    assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert settings.log_level == "DEBUG"
    assert settings.log_json is True


def test_unknown_backend_falls_back_to_memory(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "postgres")
    assert get_settings().persistence_backend == "memory"


def test_star_origin(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "*")
    assert get_settings().cors_allow_origins == ["*"]


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="todo_api.services",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Created todo %s",
        args=(7,),
        exc_info=None,
    )
    record.todo_id = 7

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "todo_api.services"
    assert payload["message"] == "Created todo 7"
    assert payload["todo_id"] == 7
    assert "pathname" not in payload
