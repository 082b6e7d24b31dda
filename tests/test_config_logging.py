"""Tests for environment configuration and log formatting."""

import json
import logging
import sys

from customer_service.config import Settings
from customer_service.logging_config import JsonFormatter


class TestSettingsFromEnv:

    def test_defaults(self, monkeypatch):
        for name in ("DATABASE_URL", "CORS_ORIGINS", "HIDE_UNKNOWN_EMAIL", "BCRYPT_ROUNDS"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()
        assert settings.database_url == "sqlite:///./customers.db"
        assert settings.cors_origins == ["http://localhost"]
        assert settings.hide_unknown_email is False
        assert settings.bcrypt_rounds == 10

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "http://a.example, http://b.example,,")
        monkeypatch.setenv("HIDE_UNKNOWN_EMAIL", "True")
        monkeypatch.setenv("MOVEMENT_MAX_ATTEMPTS", "7")
        monkeypatch.setenv("JWT_SECRET", "s3cret")
        settings = Settings.from_env()
        assert settings.cors_origins == ["http://a.example", "http://b.example"]
        assert settings.hide_unknown_email is True
        assert settings.movement_max_attempts == 7
        assert settings.jwt_secret == "s3cret"

    def test_hide_unknown_email_false_values(self, monkeypatch):
        for value in ("0", "no", "false", ""):
            monkeypatch.setenv("HIDE_UNKNOWN_EMAIL", value)
            assert Settings.from_env().hide_unknown_email is False


class TestJsonFormatter:

    def make_record(self, msg, args=(), exc_info=None):
        return logging.LogRecord("customer_service.store", logging.WARNING, __file__, 1, msg, args, exc_info)

    def test_line_shape(self):
        line = JsonFormatter().format(self.make_record("Customer %s: %s", ("abc", "conflict")))
        data = json.loads(line)
        assert data["level"] == "WARNING"
        assert data["logger"] == "customer_service.store"
        assert data["message"] == "Customer abc: conflict"
        assert "timestamp" in data
        assert "exception" not in data

    def test_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = self.make_record("failed", exc_info=sys.exc_info())
        data = json.loads(JsonFormatter().format(record))
        assert "ValueError: boom" in data["exception"]
