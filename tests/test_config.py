"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from config import Settings
from session import origin_allowed


def test_defaults():
    settings = Settings()
    assert settings.port == 8080
    assert settings.provider == "yahoo"
    assert settings.history_range == "2y"
    assert settings.allowed_origins == ["*"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SIGNAL_STREAM_PORT", "9000")
    monkeypatch.setenv("SIGNAL_STREAM_PROVIDER", "synthetic")
    monkeypatch.setenv("SIGNAL_STREAM_ALLOWED_ORIGINS", '["https://app.example"]')
    settings = Settings()
    assert settings.port == 9000
    assert settings.provider == "synthetic"
    assert settings.allowed_origins == ["https://app.example"]


def test_settings_are_immutable():
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.allowed_origins = []


def test_origin_policy():
    assert origin_allowed("https://anything.example", ["*"])
    assert origin_allowed(None, ["https://app.example"])
    assert origin_allowed("https://app.example", ["https://app.example"])
    assert not origin_allowed("https://evil.example", ["https://app.example"])
