"""DTOs for cases, documents and document versions (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CaseResult:
    """Case read-model used for access checks and upload targeting."""

    id: str
    tenant_id: str
    title: str
    deleted_at: datetime | None = None


@dataclass(frozen=True)
class DocumentResult:
    """Document read-model. file_key is None until the first version is finalized."""

    id: str
    tenant_id: str
    case_id: str
    title: str
    category: str | None
    notes: str | None
    file_key: str | None
    content_type: str | None
    file_size: int | None
    version: int
    uploader_id: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def next_version(self) -> int:
        """Version the next upload targets (1 while the document has no file yet)."""
        return 1 if self.file_key is None else self.version + 1


@dataclass(frozen=True)
class DocumentVersionResult:
    """Immutable history entry for one committed upload."""

    id: str
    tenant_id: str
    document_id: str
    version: int
    file_key: str
    content_type: str
    file_size: int
    uploader_id: str | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class DocumentDownloadLink:
    """Signed GET link for one document version."""

    document_id: str
    version: int
    url: str
    expires_at: datetime
