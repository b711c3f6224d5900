"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Schema is managed by Alembic migrations. Engine and session factory are
created lazily on first use so import does not trigger Settings validation.

Sessions set app.current_tenant_id from the tenant context (set by
TenantContextMiddleware) so row-level security policies, when enabled,
restrict rows to the current tenant.
"""

import logging
import re
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from lawdesk.core.config import get_settings
from lawdesk.core.tenant_context import get_tenant_id as get_current_tenant_id

logger = logging.getLogger(__name__)

# Strict format for tenant_id before interpolation into SET LOCAL (CUID/UUID-style).
_TENANT_ID_MAX_LENGTH = 64
_TENANT_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{1," + str(_TENANT_ID_MAX_LENGTH) + r"}$")

# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: Any = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def _ensure_engine() -> async_sessionmaker[AsyncSession]:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return AsyncSessionLocal
    settings = get_settings()
    pool_size = settings.db_pool_size if settings.db_pool_size is not None else 20
    max_overflow = (
        settings.db_max_overflow if settings.db_max_overflow is not None else 30
    )
    command_timeout = (
        settings.db_command_timeout
        if settings.db_command_timeout is not None
        else 60
    )
    connect_args: dict[str, Any] = {}
    if "postgresql" in settings.database_url:
        connect_args["command_timeout"] = command_timeout
        connect_args["server_settings"] = {"jit": "off"}
    engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=3600,
        connect_args=connect_args,
    )
    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )
    return AsyncSessionLocal


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the process-wide session factory (creates the engine on first call)."""
    return _ensure_engine()


async def dispose_engine() -> None:
    """Dispose the engine (shutdown, scripts)."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def _quote_set_value(value: str) -> str:
    """Escape a value for use in PostgreSQL SET (single-quoted literal)."""
    return value.replace("'", "''")


def _is_valid_tenant_id_for_set_local(value: str) -> bool:
    """Return True if value is safe to interpolate into SET LOCAL (format + length)."""
    if not value or len(value) > _TENANT_ID_MAX_LENGTH:
        return False
    return bool(_TENANT_ID_RE.fullmatch(value))


async def set_tenant_context(session: AsyncSession, tenant_id: str | None = None) -> None:
    """Set app.current_tenant_id on the session's current transaction.

    SET LOCAL does not support bound parameters in PostgreSQL; the value must be
    interpolated. We validate format (CUID/UUID-style, max length) and escape
    single quotes. If validation fails, we skip SET LOCAL and log.
    """
    tenant_id = tenant_id or get_current_tenant_id()
    if not tenant_id:
        return
    if not _is_valid_tenant_id_for_set_local(tenant_id):
        logger.warning(
            "Skipping SET LOCAL app.current_tenant_id: tenant_id failed format validation (length=%d, max=%d)",
            len(tenant_id),
            _TENANT_ID_MAX_LENGTH,
        )
        return
    safe = _quote_set_value(tenant_id)
    await session.execute(text(f"SET LOCAL app.current_tenant_id = '{safe}'"))


async def get_db():
    """Database session dependency for read operations.

    Does not commit. Yields a session and closes it on exit.
    """
    session_factory = _ensure_engine()
    async with session_factory() as session:
        async with session.begin():
            await set_tenant_context(session)
            yield session
