"""Pooled access to the workflow platform's PostgreSQL user store."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from .config import Settings

logger = logging.getLogger("n8n_user_manager.database")


class DatabaseError(Exception):
    """Base class for failures raised by :class:`CredentialStore`."""


class DatabaseConnectionError(DatabaseError):
    """Raised when a pooled connection cannot be obtained."""


class QueryError(DatabaseError):
    """Raised when a statement fails on an open connection."""


def _describe(exc: BaseException) -> str:
    # SQLAlchemy wraps driver errors; surface the driver's own message.
    original = getattr(exc, "orig", None)
    message = str(original if original is not None else exc).strip()
    return message or exc.__class__.__name__


def build_database_url(settings: Settings) -> URL:
    """Return the async PostgreSQL URL described by ``settings``."""

    return URL.create(
        "postgresql+psycopg",
        username=settings.db_user,
        password=settings.db_password,
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
    )


class CredentialStore:
    """Execute parameterised statements against a pooled async engine."""

    def __init__(self, url: str | URL, **engine_options: Any) -> None:
        self._engine: AsyncEngine = create_async_engine(url, **engine_options)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialStore":
        return cls(
            build_database_url(settings),
            pool_size=settings.pool_size,
            max_overflow=0,
            pool_pre_ping=True,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def query(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """Run a single statement and return its rows as dictionaries.

        Statements that produce no result set (``UPDATE`` and friends) return an
        empty list. Every statement is committed before the connection goes back
        to the pool.
        """

        try:
            conn = await self._engine.connect()
        except (SQLAlchemyError, OSError) as exc:
            raise DatabaseConnectionError(_describe(exc)) from exc

        try:
            result = await conn.execute(text(sql), dict(params or {}))
            rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
            await conn.commit()
        except SQLAlchemyError as exc:
            raise QueryError(_describe(exc)) from exc
        finally:
            await conn.close()

        return rows

    async def ping(self) -> None:
        """Raise :class:`DatabaseError` unless the store answers a trivial query."""

        await self.query("SELECT 1")

    async def close(self) -> None:
        """Release every pooled connection."""

        logger.info("Closing database connection pool")
        await self._engine.dispose()


__all__ = [
    "CredentialStore",
    "DatabaseConnectionError",
    "DatabaseError",
    "QueryError",
    "build_database_url",
]
