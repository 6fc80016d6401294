"""Async SQLAlchemy database handle, declarative base, and session dependency.

The engine and its connection pool live inside a :class:`Database` instance
that is built once per process (application lifespan, migration script, or
test fixture) and passed to whatever needs it. Nothing in this module opens
a connection at import time.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import Request
from sqlalchemy import event, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from app.config import Settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )


class IntegerPrimaryKeyMixin:
    """Mixin that adds an auto-incrementing integer primary key."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)


def _configure_sqlite(engine: AsyncEngine) -> None:
    """Enforce foreign keys and make every SQLite transaction take the write lock up front.

    pysqlite defers BEGIN until the first DML statement, which leaves DDL
    outside the transaction. Emitting ``BEGIN IMMEDIATE`` ourselves keeps
    migrations atomic and serializes concurrent writers.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """Owns the async engine (and therefore the connection pool) and a session factory."""

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
    ) -> None:
        self.url = make_url(url)
        engine_kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}

        if self.is_sqlite:
            if self.url.database in (None, "", ":memory:"):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
            )

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        if self.is_sqlite:
            _configure_sqlite(self.engine)

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.async_database_url,
            echo=settings.debug,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.get_backend_name() == "sqlite"

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that commits on success and rolls back on any exception.

        The session is closed (and its connection returned to the pool) on
        every exit path, including cancellation.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def dispose(self) -> None:
        await self.engine.dispose()


def dialect_insert(dialect_name: str, table: Any) -> Any:
    """Return a dialect-specific INSERT construct that supports ``on_conflict_*``."""
    if dialect_name == "postgresql":
        return postgresql.insert(table)
    if dialect_name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upserts are not supported on dialect {dialect_name!r}")


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:  # type: ignore[misc]
    """Yield an async database session for FastAPI dependency injection.

    Usage::

        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
