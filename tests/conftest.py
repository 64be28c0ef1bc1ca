"""
Root pytest configuration.

Points the default database at in-memory SQLite before any package module
reads the environment, and provides an isolated database per test.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from macro_tracker.shared.db import create_db_engine, init_db  # noqa: E402
from macro_tracker.shared.utils import EASTERN  # noqa: E402


def _eastern(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0):
    return EASTERN.localize(datetime(year, month, day, hour, minute, second))


@pytest.fixture
def et():
    """Build an aware datetime from an Eastern wall-clock time."""
    return _eastern


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_db_engine("sqlite://")
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    engine.dispose()
