"""Database engine, session factory, ORM models, and storage utilities."""

from .base import Base
from .engine import create_db_engine, engine
from .models import MacroLogRow
from .session import SessionLocal, get_db, init_db
from .storage import SqlLogStore, row_to_record

__all__ = [
    # ORM infrastructure
    "Base",
    "engine",
    "create_db_engine",
    "SessionLocal",
    "get_db",
    "init_db",
    # ORM models
    "MacroLogRow",
    # Storage
    "SqlLogStore",
    "row_to_record",
]
