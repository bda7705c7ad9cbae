import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

log = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url:
            # In-memory SQLite needs one shared connection across threads
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    return create_engine(database_url, pool_pre_ping=True)


class Database:
    """Owns the engine and session factory for the metadata store."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @classmethod
    def open(cls, database_url: str) -> "Database":
        database = cls(build_engine(database_url))
        log.info("Metadata store opened (%s)", database.engine.url.get_backend_name())
        return database

    def create_tables(self) -> None:
        # Models must be imported before this so they register on Base.metadata
        import models.image  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def close(self) -> None:
        self.engine.dispose()
        log.info("Metadata store closed")


def get_db(request: Request) -> Iterator[Session]:
    """
    Dependency to provide a DB session for FastAPI routes.
    Ensures sessions are closed automatically to prevent memory leaks.
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
