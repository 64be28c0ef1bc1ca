from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import QueuePool, StaticPool

from macro_tracker.shared.config import Config


def create_db_engine(database_url: str | None = None, echo: bool | None = None) -> Engine:
    """Create an engine for ``database_url`` (default: ``Config.DATABASE_URL``).

    SQLite files get their parent directory created; in-memory SQLite shares a
    single connection so the background writer sees the same database.
    """
    url = make_url(database_url or Config.DATABASE_URL)
    echo = Config.DB_ECHO if echo is None else echo

    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            return create_engine(
                url, echo=echo, connect_args={"check_same_thread": False}
            )
        return create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,
        echo=echo,
    )


engine = create_db_engine()
