"""SQLModel engine and session management for the device store."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, SQLModel, create_engine


def create_db_engine(database_url: str) -> Engine:
    """Build an engine, creating the parent directory of a SQLite file if needed."""

    url = make_url(database_url)
    connect_args: dict[str, object] = {}
    if url.get_backend_name() == "sqlite":
        # Drains may run from the FastAPI threadpool
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, echo=False, pool_pre_ping=True, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    # Import models so their tables are registered on the metadata
    from fleetsync import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


@contextmanager
def get_session(engine: Engine) -> Iterator[Session]:
    """Get a database session as a context manager."""
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


__all__ = ["create_db_engine", "init_db", "get_session"]
