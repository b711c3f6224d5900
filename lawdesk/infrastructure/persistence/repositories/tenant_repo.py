"""Tenant repository (scripts only; the API resolves tenants from the request)."""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.domain.enums import TenantStatus
from lawdesk.infrastructure.persistence.models.tenant import Tenant
from lawdesk.infrastructure.persistence.repositories.base import BaseRepository


@dataclass(frozen=True)
class TenantRef:
    id: str
    code: str


class TenantRepository(BaseRepository[Tenant]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Tenant)

    async def list_active(self) -> list[TenantRef]:
        result = await self.db.execute(
            select(Tenant.id, Tenant.code)
            .where(Tenant.status == TenantStatus.ACTIVE.value)
            .order_by(Tenant.code)
        )
        return [TenantRef(id=row.id, code=row.code) for row in result.all()]

    async def get_by_code(self, code: str) -> Tenant | None:
        result = await self.db.execute(select(Tenant).where(Tenant.code == code))
        return result.scalar_one_or_none()
