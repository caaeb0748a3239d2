"""Tests for settings, tokens and logging setup."""

import logging
import uuid
from datetime import timedelta

import pytest
from jose import jwt

from portal.core.config import Settings, get_settings
from portal.core.logger import setup_logger
from portal.core.security import create_access_token, decode_token
from portal.db.session import build_engine


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.app_name == "CITT Innovation Portal"
        assert settings.cap_approved_amount is False
        assert settings.notifications_enabled is True
        assert settings.webhook_timeout == 30

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CAP_APPROVED_AMOUNT", "true")
        monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.org/citt")
        settings = Settings(_env_file=None)
        assert settings.cap_approved_amount is True
        assert settings.webhook_url == "https://hooks.example.org/citt"

    def test_cors_origins_list(self):
        settings = Settings(_env_file=None, cors_origins="https://citt.ac.tz, http://localhost:3000,")
        assert settings.cors_origins_list == ["https://citt.ac.tz", "http://localhost:3000"]

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestTokens:
    """Tests for bearer token helpers."""

    def test_round_trip(self):
        assert decode_token(create_access_token(42)) == 42

    def test_expired_token(self):
        assert decode_token(create_access_token(42, expires_delta=timedelta(seconds=-1))) is None

    def test_garbage_token(self):
        assert decode_token("not-a-token") is None

    def test_wrong_type(self):
        settings = get_settings()
        token = jwt.encode({"sub": "42", "type": "refresh"}, settings.secret_key, algorithm=settings.algorithm)
        assert decode_token(token) is None

    def test_non_numeric_subject(self):
        settings = get_settings()
        token = jwt.encode({"sub": "alice", "type": "access"}, settings.secret_key, algorithm=settings.algorithm)
        assert decode_token(token) is None


class TestLogger:
    """Tests for logger setup."""

    def test_console_only_by_default(self):
        logger = setup_logger(f"portal-test-{uuid.uuid4().hex}")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)
        assert logger.level == logging.INFO

    def test_file_handler_when_log_dir_set(self, tmp_path):
        name = f"portal-test-{uuid.uuid4().hex}"
        logger = setup_logger(name, log_dir=str(tmp_path / "logs"), level="debug")
        logger.debug("hello")
        for handler in logger.handlers:
            handler.flush()
        assert (tmp_path / "logs" / f"{name}.log").read_text().strip().endswith("hello")
        assert logger.level == logging.DEBUG

    def test_no_duplicate_handlers(self):
        name = f"portal-test-{uuid.uuid4().hex}"
        setup_logger(name)
        logger = setup_logger(name)
        assert len(logger.handlers) == 1

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logger(f"portal-test-{uuid.uuid4().hex}", level="LOUD")


class TestEngine:

    def test_memory_sqlite_shares_one_connection(self):
        engine = build_engine("sqlite://")
        assert type(engine.pool).__name__ == "StaticPool"
        engine.dispose()
