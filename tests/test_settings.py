from __future__ import annotations

import json
import logging

import pytest

from src.task_api.db import SQLiteTaskStore
from src.task_api.generate_openapi import generate_openapi
from src.task_api.logging_setup import LOGGER_NAME, configure_logging
from src.task_api.repositories import InMemoryTaskStore, get_task_store
from src.task_api.settings import get_settings


@pytest.fixture()
def fresh_store_cache():
    get_task_store.cache_clear()
    yield
    get_task_store.cache_clear()


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PERSISTENCE_BACKEND", "SQLITE_DB_PATH", "CORS_ALLOW_ORIGINS", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        s = get_settings()
        assert s.persistence_backend == "memory"
        assert s.sqlite_db_path == "./data/tasks.db"
        assert s.cors_allow_origins == ["*"]
        assert s.log_level == "INFO"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", " SQLite ")
        monkeypatch.setenv("SQLITE_DB_PATH", "/tmp/x.db")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        s = get_settings()
        assert s.persistence_backend == "sqlite"
        assert s.sqlite_db_path == "/tmp/x.db"
        assert s.cors_allow_origins == ["http://a.test", "http://b.test"]
        assert s.log_level == "DEBUG"

    def test_unknown_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "postgres")
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        s = get_settings()
        assert s.persistence_backend == "memory"
        assert s.log_level == "INFO"


class TestStoreSelection:
    def test_memory_backend(self, monkeypatch, fresh_store_cache):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "memory")
        store = get_task_store()
        assert isinstance(store, InMemoryTaskStore)
        assert get_task_store() is store

    def test_sqlite_backend(self, monkeypatch, tmp_path, fresh_store_cache):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
        monkeypatch.setenv("SQLITE_DB_PATH", str(tmp_path / "data" / "tasks.db"))
        assert isinstance(get_task_store(), SQLiteTaskStore)
        assert (tmp_path / "data" / "tasks.db").exists()


class TestLoggingSetup:
    def test_handler_installed_once(self):
        configure_logging("INFO")
        logger = configure_logging("DEBUG")
        tagged = [h for h in logger.handlers if getattr(h, "_task_api_handler", False)]
        assert len(tagged) == 1
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        configure_logging("INFO")


class TestOpenAPIExport:
    def test_writes_schema_with_task_routes(self, tmp_path):
        out = tmp_path / "interfaces" / "openapi.json"
        path = generate_openapi(str(out))
        assert path == str(out)
        schema = json.loads(out.read_text(encoding="utf-8"))
        assert "/api/tasks" in schema["paths"]
        assert "/api/tasks/{task_id}" in schema["paths"]
        assert {"health", "tasks"} <= {t["name"] for t in schema["tags"]}
        status_doc = schema["components"]["schemas"]["TaskIn"]["properties"]["status"]["description"]
        assert "In Progress" in status_doc
