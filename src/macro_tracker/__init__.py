"""Macro window tracker: live ET scheduler, observation log and statistics."""

__version__ = "0.1.0"
