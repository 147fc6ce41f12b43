#!/usr/bin/env python3
"""
Database Engine and Session Management

Owns the SQLAlchemy engine and session factory for the process.

Architectural Decision: one Database object per application
- Built once in the FastAPI lifespan and shared through app.state
- In-memory SQLite uses StaticPool so every worker thread sees the same
  database (a plain pool would hand each thread its own empty database)
- StaticPool means one DBAPI connection (and one transaction) for the
  whole process, so units of work on such an engine are serialized with
  an RLock; pooled engines run them concurrently
- session_scope() is the only way repositories touch a session, so every
  unit of work is committed or rolled back in one place

Author: System Architect
Date: 2026-10-19
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager, nullcontext

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tradeapi.core.exceptions import DatabaseError
from tradeapi.core.logging.logger import get_logger
from tradeapi.infrastructure.database.models import Base

logger = get_logger(__name__)


class Database:
    """
    SQLAlchemy engine + session factory.

    Usage:
        db = Database("sqlite://")
        db.create_schema()

        with db.session_scope() as session:
            session.add(UserRecord(name="Ada"))
    """

    def __init__(self, url: str = "sqlite://", echo: bool = False):
        self._url = url
        self._engine = self._create_engine(url, echo)
        # Shared single connection: one unit of work at a time
        self._shared_connection = isinstance(self._engine.pool, StaticPool)
        self._lock = threading.RLock()
        self._session_factory = sessionmaker(
            bind=self._engine, autocommit=False, autoflush=False, expire_on_commit=False
        )
        logger.info("Database engine created", dialect=self._engine.dialect.name)

    @classmethod
    def from_settings(cls, settings) -> "Database":
        db_settings = settings.database
        return cls(db_settings.DATABASE_URL, echo=db_settings.DATABASE_ECHO)

    @staticmethod
    def _create_engine(url: str, echo: bool) -> Engine:
        if url.startswith("sqlite"):
            return create_engine(
                url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=echo,
            )
        return create_engine(url, echo=echo, pool_pre_ping=True)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def serializes_sessions(self) -> bool:
        return self._shared_connection

    def _exclusive(self):
        return self._lock if self._shared_connection else nullcontext()

    @property
    def dialect(self) -> str:
        return self._engine.dialect.name

    def create_schema(self) -> None:
        """Create every table that does not exist yet."""
        try:
            with self._exclusive():
                Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as e:
            raise DatabaseError.for_operation("create_schema", e) from e
        logger.info("Database schema ready", tables=sorted(Base.metadata.tables))

    def drop_schema(self) -> None:
        """Drop every table (tests only)."""
        with self._exclusive():
            Base.metadata.drop_all(bind=self._engine)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Transactional scope around a series of operations.

        Commits when the block exits normally, rolls back and re-raises
        when it raises. The session is always closed. On a StaticPool
        engine the whole scope holds the database lock.
        """
        with self._exclusive():
            session = self._session_factory()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def ping(self) -> bool:
        """True when a trivial query succeeds. Used by /health."""
        try:
            with self._exclusive(), self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Database ping failed", error=str(e))
            return False

    def close(self) -> None:
        self._engine.dispose()
        logger.info("Database engine disposed")
