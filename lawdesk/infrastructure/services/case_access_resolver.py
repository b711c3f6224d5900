"""Resolves case visibility from DB (implements ICaseAccessResolver)."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.domain.enums import TenantRole
from lawdesk.infrastructure.persistence.repositories.case_repo import CaseRepository


class CaseAccessResolver:
    """Partners and admins see every live case in the tenant; others need a membership row."""

    def __init__(self, db: AsyncSession) -> None:
        self.cases = CaseRepository(db)

    async def can_access_case(
        self, tenant_id: str, user_id: str, role: str, case_id: str
    ) -> bool:
        case = await self.cases.get_by_id(tenant_id, case_id)
        if case is None:
            return False
        if role in TenantRole.values() and TenantRole(role).sees_all_cases:
            return True
        return await self.cases.is_member(tenant_id, case_id, user_id)
