"""Tests for settings validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as SettingsError

from prompt_versions.core.config import Settings


def test_defaults():
    config = Settings(_env_file=None)

    assert config.request_timeout_seconds == 25.0
    assert config.history_default_limit == 50
    assert config.cleanup_max_age_days == 90
    assert config.cleanup_min_versions == 10


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = Settings(_env_file=None)

    assert config.request_timeout_seconds == 5.0
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("field, value", [
    ("request_timeout_seconds", 0),
    ("history_default_limit", 101),
    ("log_level", "LOUD"),
    ("log_format", "xml"),
])
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(SettingsError):
        Settings(_env_file=None, **{field: value})
