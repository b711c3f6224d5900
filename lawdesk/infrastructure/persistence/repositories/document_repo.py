"""Document repository: current-version pointer and append-only version history."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.application.dtos.document import DocumentResult, DocumentVersionResult
from lawdesk.infrastructure.persistence.models.document import Document, DocumentVersion
from lawdesk.infrastructure.persistence.repositories.base import BaseRepository


def _document_to_result(d: Document) -> DocumentResult:
    return DocumentResult(
        id=d.id,
        tenant_id=d.tenant_id,
        case_id=d.case_id,
        title=d.title,
        category=d.category,
        notes=d.notes,
        file_key=d.file_key,
        content_type=d.content_type,
        file_size=d.file_size,
        version=d.version,
        uploader_id=d.uploader_id,
        created_at=d.created_at,
        updated_at=d.updated_at,
    )


def _version_to_result(v: DocumentVersion) -> DocumentVersionResult:
    return DocumentVersionResult(
        id=v.id,
        tenant_id=v.tenant_id,
        document_id=v.document_id,
        version=v.version,
        file_key=v.file_key,
        content_type=v.content_type,
        file_size=v.file_size,
        uploader_id=v.uploader_id,
        created_at=v.created_at,
    )


class DocumentRepository(BaseRepository[Document]):
    """Reads return DTOs; writes are used by the upload store inside one transaction."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Document)

    async def get_by_id(self, tenant_id: str, document_id: str) -> DocumentResult | None:
        result = await self.db.execute(
            select(Document).where(
                Document.id == document_id,
                Document.tenant_id == tenant_id,
                Document.deleted_at.is_(None),
            )
        )
        row = result.scalar_one_or_none()
        return _document_to_result(row) if row else None

    async def get_version(
        self, tenant_id: str, document_id: str, version: int
    ) -> DocumentVersionResult | None:
        result = await self.db.execute(
            select(DocumentVersion).where(
                DocumentVersion.tenant_id == tenant_id,
                DocumentVersion.document_id == document_id,
                DocumentVersion.version == version,
            )
        )
        row = result.scalar_one_or_none()
        return _version_to_result(row) if row else None

    async def get_version_by_id(
        self, tenant_id: str, version_id: str
    ) -> DocumentVersionResult | None:
        result = await self.db.execute(
            select(DocumentVersion).where(
                DocumentVersion.id == version_id,
                DocumentVersion.tenant_id == tenant_id,
            )
        )
        row = result.scalar_one_or_none()
        return _version_to_result(row) if row else None

    async def list_versions(
        self, tenant_id: str, document_id: str
    ) -> list[DocumentVersionResult]:
        result = await self.db.execute(
            select(DocumentVersion)
            .where(
                DocumentVersion.tenant_id == tenant_id,
                DocumentVersion.document_id == document_id,
            )
            .order_by(DocumentVersion.version.asc())
        )
        return [_version_to_result(v) for v in result.scalars().all()]

    async def insert_document(
        self,
        *,
        tenant_id: str,
        document_id: str,
        case_id: str,
        title: str,
        category: str | None,
        notes: str | None,
        file_key: str,
        content_type: str,
        file_size: int,
        version: int,
        uploader_id: str,
    ) -> DocumentResult:
        """Insert a brand-new document already pointing at its first version."""
        row = await self._create(
            Document(
                id=document_id,
                tenant_id=tenant_id,
                case_id=case_id,
                title=title,
                category=category,
                notes=notes,
                file_key=file_key,
                content_type=content_type,
                file_size=file_size,
                version=version,
                uploader_id=uploader_id,
            )
        )
        return _document_to_result(row)

    async def insert_version(
        self,
        *,
        tenant_id: str,
        document_id: str,
        version: int,
        file_key: str,
        content_type: str,
        file_size: int,
        uploader_id: str,
    ) -> DocumentVersionResult:
        row = await self._create(
            DocumentVersion(
                tenant_id=tenant_id,
                document_id=document_id,
                version=version,
                file_key=file_key,
                content_type=content_type,
                file_size=file_size,
                uploader_id=uploader_id,
            )
        )
        return _version_to_result(row)

    async def advance_pointer(
        self,
        *,
        tenant_id: str,
        document_id: str,
        previous_version: int | None,
        previous_file_key: str | None,
        version: int,
        file_key: str,
        content_type: str,
        file_size: int,
        uploader_id: str,
        title: str,
        category: str | None,
        notes: str | None,
        updated_at: datetime,
    ) -> bool:
        """Move the pointer to `version` only if it still holds what the caller read.

        Returns False when another finalize moved the pointer first.
        """
        criteria = [
            Document.id == document_id,
            Document.tenant_id == tenant_id,
            Document.deleted_at.is_(None),
            Document.version <= version,
        ]
        if previous_version is not None:
            criteria.append(Document.version == previous_version)
        if previous_file_key is None:
            criteria.append(Document.file_key.is_(None))
        else:
            criteria.append(Document.file_key == previous_file_key)
        changed = await self._update_where(
            *criteria,
            file_key=file_key,
            content_type=content_type,
            file_size=file_size,
            version=version,
            uploader_id=uploader_id,
            title=title,
            category=category,
            notes=notes,
            updated_at=updated_at,
        )
        return changed == 1
