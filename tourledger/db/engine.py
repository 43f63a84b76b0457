from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import os
from pathlib import Path
from dotenv import load_dotenv
from .utils import is_memory_sqlite, resolve_sqlite_url

# Get DB url
load_dotenv()
# Project root directory (repo root)
ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_SQLITE_URL = resolve_sqlite_url(
    os.getenv("DB_URL", "sqlite:///./dev.db"), ROOT_DIR
)


from typing import Optional


def make_engine(database_url: Optional[str] = None, echo: bool = False):
    url = database_url or DEFAULT_SQLITE_URL
    kwargs = {}
    if url.startswith("sqlite"):
        # Request threads share the engine; the domain locks serialize writers.
        kwargs["connect_args"] = {"check_same_thread": False}
        if is_memory_sqlite(url):
            # Every connection to ":memory:" is a fresh database, so pin one.
            kwargs["poolclass"] = StaticPool
    engine = create_engine(
        url,
        echo=echo,
        future=True,
        **kwargs,
    )
    if url.startswith("sqlite"):
        from sqlalchemy import event

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def get_sessionmaker(engine):
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,  # Keep objects accessible after commit for callers
        future=True,
    )
