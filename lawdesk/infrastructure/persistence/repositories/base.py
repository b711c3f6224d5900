"""Base repository: tenant-scoped lookup, create and conditional update helpers."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.infrastructure.persistence.database import Base


class BaseRepository[ModelType: Base]:
    """Base repository bound to one session. Subclasses map rows to application DTOs."""

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get_in_tenant(self, tenant_id: str, entity_id: str) -> ModelType | None:
        """Return a single record by primary key within the tenant, or None."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model).where(model.id == entity_id, model.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def _create(self, obj: ModelType) -> ModelType:
        """Persist a new record (flush + refresh for server defaults)."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _update_where(self, *criteria: Any, **values: Any) -> int:
        """UPDATE ... WHERE criteria; returns the number of rows changed."""
        result = await self.db.execute(
            update(self.model)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0


_UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """Return True if the IntegrityError is a PostgreSQL unique_violation (SQLSTATE 23505)."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is None and orig is not None:
        code = getattr(getattr(orig, "__cause__", None), "sqlstate", None)
    return code == _UNIQUE_VIOLATION
