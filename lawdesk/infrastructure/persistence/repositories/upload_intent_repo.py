"""Upload intent ledger repository.

Status transitions are conditional UPDATEs (`WHERE status = 'INITIATED'`), so a
terminal intent is never moved again no matter how calls interleave.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.application.dtos.upload import UploadIntentCreate, UploadIntentResult
from lawdesk.domain.enums import UploadIntentStatus
from lawdesk.domain.exceptions import UploadIntentConflictException
from lawdesk.infrastructure.persistence.models.upload_intent import UploadIntent
from lawdesk.infrastructure.persistence.repositories.base import (
    BaseRepository,
    is_unique_violation,
)

_INITIATED = UploadIntentStatus.INITIATED.value


def _intent_to_result(i: UploadIntent) -> UploadIntentResult:
    return UploadIntentResult(
        id=i.id,
        tenant_id=i.tenant_id,
        kind=i.kind,
        case_id=i.case_id,
        document_id=i.document_id,
        key=i.key,
        filename=i.filename,
        content_type=i.content_type,
        expected_file_size=i.expected_file_size,
        expected_version=i.expected_version,
        status=i.status,
        expires_at=i.expires_at,
        created_by=i.created_by,
        last_error=i.last_error,
        result=i.result,
        document_version_id=i.document_version_id,
        finalized_at=i.finalized_at,
        cleaned_at=i.cleaned_at,
        created_at=i.created_at,
        updated_at=i.updated_at,
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class UploadIntentRepository(BaseRepository[UploadIntent]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, UploadIntent)

    async def create(self, data: UploadIntentCreate) -> UploadIntentResult:
        """Insert an INITIATED intent. A duplicate id or key raises UploadIntentConflictException."""
        intent = UploadIntent(
            id=data.id,
            tenant_id=data.tenant_id,
            kind=data.kind,
            case_id=data.case_id,
            document_id=data.document_id,
            key=data.key,
            filename=data.filename,
            content_type=data.content_type,
            expected_file_size=data.expected_file_size,
            expected_version=data.expected_version,
            status=_INITIATED,
            expires_at=data.expires_at,
            created_by=data.created_by,
            result=data.result,
        )
        try:
            async with self.db.begin_nested():
                created = await self._create(intent)
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise UploadIntentConflictException(
                    data.id, "an upload intent with this id or key already exists"
                ) from exc
            raise
        return _intent_to_result(created)

    async def get_by_id(self, tenant_id: str, intent_id: str) -> UploadIntentResult | None:
        row = await self._get_in_tenant(tenant_id, intent_id)
        return _intent_to_result(row) if row else None

    async def get_by_key(self, tenant_id: str, key: str) -> UploadIntentResult | None:
        result = await self.db.execute(
            select(UploadIntent).where(
                UploadIntent.tenant_id == tenant_id, UploadIntent.key == key
            )
        )
        row = result.scalar_one_or_none()
        return _intent_to_result(row) if row else None

    def _initiated(self, tenant_id: str, intent_id: str) -> list[Any]:
        return [
            UploadIntent.id == intent_id,
            UploadIntent.tenant_id == tenant_id,
            UploadIntent.status == _INITIATED,
        ]

    def _any_status(self, tenant_id: str, intent_id: str) -> list[Any]:
        return [UploadIntent.id == intent_id, UploadIntent.tenant_id == tenant_id]

    async def mark_finalized(
        self,
        tenant_id: str,
        intent_id: str,
        document_version_id: str | None,
        result: dict[str, Any],
        finalized_at: datetime,
    ) -> bool:
        changed = await self._update_where(
            *self._initiated(tenant_id, intent_id),
            status=UploadIntentStatus.FINALIZED.value,
            last_error=None,
            document_version_id=document_version_id,
            result=result,
            finalized_at=finalized_at,
        )
        return changed == 1

    async def mark_failed(
        self,
        tenant_id: str,
        intent_id: str,
        error: str,
        result: dict[str, Any] | None = None,
    ) -> bool:
        values: dict[str, Any] = {
            "status": UploadIntentStatus.FAILED.value,
            "last_error": error,
        }
        if result is not None:
            values["result"] = result
        changed = await self._update_where(*self._initiated(tenant_id, intent_id), **values)
        return changed == 1

    async def mark_expired(
        self,
        tenant_id: str,
        intent_id: str,
        cleaned_at: datetime,
        result: dict[str, Any] | None = None,
    ) -> bool:
        values: dict[str, Any] = {
            "status": UploadIntentStatus.EXPIRED.value,
            "cleaned_at": cleaned_at,
        }
        if result is not None:
            values["result"] = result
        changed = await self._update_where(*self._initiated(tenant_id, intent_id), **values)
        return changed == 1

    async def record_error(self, tenant_id: str, intent_id: str, error: str) -> bool:
        changed = await self._update_where(
            *self._initiated(tenant_id, intent_id), last_error=error
        )
        return changed == 1

    async def mark_cleaned(
        self,
        tenant_id: str,
        intent_id: str,
        cleaned_at: datetime,
        result: dict[str, Any] | None = None,
    ) -> bool:
        values: dict[str, Any] = {"cleaned_at": cleaned_at}
        if result is not None:
            values["result"] = result
        changed = await self._update_where(*self._any_status(tenant_id, intent_id), **values)
        return changed == 1

    async def update_result(
        self, tenant_id: str, intent_id: str, result: dict[str, Any]
    ) -> bool:
        changed = await self._update_where(
            *self._any_status(tenant_id, intent_id), result=result
        )
        return changed == 1

    async def list_stale(
        self, tenant_id: str, cutoff: datetime, take: int
    ) -> list[UploadIntentResult]:
        result = await self.db.execute(
            select(UploadIntent)
            .where(
                UploadIntent.tenant_id == tenant_id,
                UploadIntent.status.in_(
                    [_INITIATED, UploadIntentStatus.FAILED.value]
                ),
                UploadIntent.cleaned_at.is_(None),
                UploadIntent.expires_at < cutoff,
            )
            .order_by(UploadIntent.expires_at.asc(), UploadIntent.id.asc())
            .limit(take)
        )
        return [_intent_to_result(i) for i in result.scalars().all()]

    async def list_page(
        self,
        tenant_id: str,
        status: str | None,
        query: str | None,
        take: int,
        cursor: str | None,
    ) -> list[UploadIntentResult]:
        stmt = select(UploadIntent).where(UploadIntent.tenant_id == tenant_id)
        if status:
            stmt = stmt.where(UploadIntent.status == status)
        if query:
            pattern = f"%{_escape_like(query)}%"
            stmt = stmt.where(
                or_(
                    UploadIntent.filename.ilike(pattern, escape="\\"),
                    UploadIntent.key.ilike(pattern, escape="\\"),
                    UploadIntent.document_id.ilike(pattern, escape="\\"),
                )
            )
        if cursor:
            anchor = await self._get_in_tenant(tenant_id, cursor)
            if anchor is not None:
                stmt = stmt.where(
                    or_(
                        UploadIntent.created_at < anchor.created_at,
                        (UploadIntent.created_at == anchor.created_at)
                        & (UploadIntent.id < anchor.id),
                    )
                )
        stmt = stmt.order_by(UploadIntent.created_at.desc(), UploadIntent.id.desc()).limit(take)
        result = await self.db.execute(stmt)
        return [_intent_to_result(i) for i in result.scalars().all()]

    async def count_by_status(self, tenant_id: str) -> dict[str, int]:
        result = await self.db.execute(
            select(UploadIntent.status, func.count(UploadIntent.id))
            .where(UploadIntent.tenant_id == tenant_id)
            .group_by(UploadIntent.status)
        )
        return {status: count for status, count in result.all()}
