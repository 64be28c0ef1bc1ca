from contextlib import contextmanager

from sqlalchemy.orm import sessionmaker

from .base import Base
from .engine import engine

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@contextmanager
def get_db(session_factory: sessionmaker = SessionLocal):
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind=engine) -> None:
    """Create missing tables."""
    Base.metadata.create_all(bind=bind)
