"""Shared utilities and configuration."""

from macro_tracker.shared.config import Config
from macro_tracker.shared.utils import eastern_fields, setup_logger, to_eastern

__all__ = ["Config", "setup_logger", "to_eastern", "eastern_fields"]
