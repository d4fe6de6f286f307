import logging

import pytest

from sketch_time.core.config import Settings, validate_config
from sketch_time.core.validation import EnvValidationError, validate_env


def make_settings(**overrides):
    return Settings(_env_file=None, **overrides)


def test_development_without_database_is_fine(monkeypatch):
    monkeypatch.delenv("SKIP_ENV_VALIDATION", raising=False)
    assert validate_env(settings_obj=make_settings(ENV="development"))


def test_production_requires_database_and_bot_token(monkeypatch):
    monkeypatch.delenv("SKIP_ENV_VALIDATION", raising=False)
    with pytest.raises(EnvValidationError):
        validate_env(settings_obj=make_settings(ENV="production", DATABASE_URL="postgresql://u:p@db:5432/sketch"))

    cfg = make_settings(ENV="production", DATABASE_URL="postgresql://u:p@db:5432/sketch", TELEGRAM_BOT_TOKEN="1:x")
    assert validate_env(settings_obj=cfg)


def test_malformed_database_url_rejected(monkeypatch):
    monkeypatch.delenv("SKIP_ENV_VALIDATION", raising=False)
    with pytest.raises(EnvValidationError):
        validate_env(settings_obj=make_settings(DATABASE_URL="not a url"))


def test_sqlite_url_accepted(monkeypatch):
    monkeypatch.delenv("SKIP_ENV_VALIDATION", raising=False)
    assert validate_env(settings_obj=make_settings(DATABASE_URL="sqlite:///sketch.db"))


def test_test_database_only_in_test_mode(monkeypatch):
    monkeypatch.delenv("SKIP_ENV_VALIDATION", raising=False)
    with pytest.raises(EnvValidationError):
        validate_env(settings_obj=make_settings(ENV="development", TEST_DATABASE_URL="sqlite://"))
    assert validate_env(settings_obj=make_settings(ENV="test", TEST_DATABASE_URL="sqlite://"))


def test_skip_flag_bypasses_validation(monkeypatch):
    monkeypatch.setenv("SKIP_ENV_VALIDATION", "1")
    assert validate_env(settings_obj=make_settings(ENV="production"))


def test_validate_config_warns_or_raises(caplog):
    cfg = make_settings()
    with caplog.at_level(logging.WARNING, logger="sketch_time"):
        assert validate_config(strict=False, settings_obj=cfg)
    assert "TELEGRAM_BOT_TOKEN" in caplog.text

    with pytest.raises(RuntimeError):
        validate_config(strict=True, settings_obj=cfg)
