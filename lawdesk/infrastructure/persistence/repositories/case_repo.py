"""Case repository: case lookup and membership checks for access decisions."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.application.dtos.document import CaseResult
from lawdesk.infrastructure.persistence.models.legal_case import CaseMember, LegalCase
from lawdesk.infrastructure.persistence.repositories.base import BaseRepository


def _case_to_result(c: LegalCase) -> CaseResult:
    return CaseResult(id=c.id, tenant_id=c.tenant_id, title=c.title, deleted_at=c.deleted_at)


class CaseRepository(BaseRepository[LegalCase]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, LegalCase)

    async def get_by_id(self, tenant_id: str, case_id: str) -> CaseResult | None:
        result = await self.db.execute(
            select(LegalCase).where(
                LegalCase.id == case_id,
                LegalCase.tenant_id == tenant_id,
                LegalCase.deleted_at.is_(None),
            )
        )
        row = result.scalar_one_or_none()
        return _case_to_result(row) if row else None

    async def is_member(self, tenant_id: str, case_id: str, user_id: str) -> bool:
        result = await self.db.execute(
            select(CaseMember.id)
            .where(
                CaseMember.tenant_id == tenant_id,
                CaseMember.case_id == case_id,
                CaseMember.user_id == user_id,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None
