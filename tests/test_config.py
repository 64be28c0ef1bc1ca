"""Tests for configuration module."""
import os
from pathlib import Path

import pytest

from macro_tracker.macros.catalog import SessionFilters
from macro_tracker.shared.config import Config


def test_config_paths_exist():
    """Test that config paths are properly initialized."""
    assert isinstance(Config.ROOT_DIR, Path)
    assert isinstance(Config.DATA_DIR, Path)
    assert isinstance(Config.LOGS_DIR, Path)
    assert Config.EXPORT_DIR.parent == Config.DATA_DIR


def test_config_default_values():
    """Test default configuration values."""
    assert Config.DATABASE_URL == os.getenv("DATABASE_URL")
    assert Config.USER_ID == os.getenv("MACRO_USER_ID", "local")
    assert Config.TICK_INTERVAL_SECONDS == float(os.getenv("TICK_INTERVAL_SECONDS", "1.0"))


def test_config_session_filters():
    """Test session toggles are exposed as filters."""
    filters = Config.session_filters()
    assert isinstance(filters, SessionFilters)
    assert filters.show_asia_macros == Config.SHOW_ASIA_MACROS
    assert filters.show_london_macros == Config.SHOW_LONDON_MACROS
    assert filters.show_ny_macros == Config.SHOW_NY_MACROS


def test_config_validation_bad_interval(monkeypatch):
    """Test configuration validation fails for a non-positive tick interval."""
    monkeypatch.setattr(Config, "TICK_INTERVAL_SECONDS", 0.0)
    with pytest.raises(ValueError, match="TICK_INTERVAL_SECONDS"):
        Config.validate()


def test_config_validation_missing_user(monkeypatch):
    """Test configuration validation fails without a user id."""
    monkeypatch.setattr(Config, "USER_ID", "")
    with pytest.raises(ValueError, match="MACRO_USER_ID not set"):
        Config.validate()


def test_config_validation_passes_with_defaults(monkeypatch):
    monkeypatch.setattr(Config, "TICK_INTERVAL_SECONDS", 1.0)
    monkeypatch.setattr(Config, "USER_ID", "local")
    Config.validate()
