"""
Unit tests for configuration helpers.
"""

import pytest

from medbook.config import DEV_SECRET_KEY, get_env, load_settings


# ── Tests: get_env ───────────────────────────────────────────────────

def test_get_env_ok(monkeypatch):
    monkeypatch.setenv("X", "123")
    assert get_env("X") == "123"


def test_get_env_missing_exits(monkeypatch, capsys):
    monkeypatch.delenv("MISSING_ENV", raising=False)
    with pytest.raises(SystemExit) as e:
        get_env("MISSING_ENV")
    assert e.value.code == 1
    err = capsys.readouterr().err
    assert "ERROR: env var MISSING_ENV is not set" in err


# ── Tests: load_settings ─────────────────────────────────────────────

def test_development_defaults(monkeypatch):
    for name in ("APP_ENV", "DB_URI", "JWT_SECRET_KEY", "FRONTEND_URL", "PORT"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.env == "development"
    assert settings.port == 5000
    assert settings.secret_key == DEV_SECRET_KEY
    assert settings.frontend_url == "http://localhost:3000"
    assert not settings.is_production


def test_production_requires_secrets(monkeypatch, capsys):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("DB_URI", "sqlite://")
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    with pytest.raises(SystemExit):
        load_settings()
    assert "JWT_SECRET_KEY" in capsys.readouterr().err


def test_production_reads_environment(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("DB_URI", "postgresql://db/medbook")
    monkeypatch.setenv("JWT_SECRET_KEY", "s3cret")
    monkeypatch.setenv("FRONTEND_URL", "https://portal.clinic.org")
    monkeypatch.setenv("PORT", "8080")
    settings = load_settings()
    assert settings.is_production
    assert settings.port == 8080
    assert settings.db_uri == "postgresql://db/medbook"
    assert settings.frontend_url == "https://portal.clinic.org"
