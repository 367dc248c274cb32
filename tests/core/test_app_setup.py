import json
import logging

from fastapi.testclient import TestClient

from src.core.config import AppSettings, DatabaseSettings
from src.core.logging_config import CustomJsonFormatter, setup_logging


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("APP_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("APP_LOG_JSON", "false")
    monkeypatch.setenv("DB_URL", "sqlite+aiosqlite:///./other.db")
    assert AppSettings().log_level == "DEBUG"
    assert AppSettings().log_json is False
    assert DatabaseSettings().url == "sqlite+aiosqlite:///./other.db"

def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("APP_API_PREFIX", raising=False)
    assert AppSettings().api_prefix == "/api/v1"

def test_json_formatter_adds_level_and_location():
    formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(name)s %(message)s')
    record = logging.LogRecord("scoring", logging.WARNING, __file__, 10, "no match", None, None)
    payload = json.loads(formatter.format(record))
    assert payload["level"] == "WARNING"
    assert payload["message"] == "no match"
    assert payload["lineno"] == 10
    assert "timestamp" in payload

def test_setup_logging_installs_one_handler():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        setup_logging("DEBUG")
        setup_logging("DEBUG")
        added = [h for h in root.handlers if h not in before]
        assert len(added) <= 1
        assert root.level == logging.DEBUG
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
        root.setLevel(level)

def test_health_endpoint():
    from main import app

    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
