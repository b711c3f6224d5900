"""DTOs for the direct-upload protocol: intents, commands, results, commit outcomes."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class StoredObject:
    """Object metadata as reported by storage (HEAD)."""

    key: str
    content_length: int
    content_type: str | None = None
    etag: str | None = None
    last_modified: datetime | None = None


@dataclass(frozen=True)
class PresignedUpload:
    """A time-limited write capability for one key."""

    url: str
    method: str
    headers: dict[str, str]
    expires_at: datetime


@dataclass(frozen=True)
class UploadIntentCreate:
    """Input for opening an upload intent (status INITIATED)."""

    id: str
    tenant_id: str
    kind: str
    case_id: str
    document_id: str
    key: str
    filename: str
    content_type: str
    expected_file_size: int
    expected_version: int
    expires_at: datetime
    created_by: str | None
    result: dict[str, Any] | None = None


@dataclass(frozen=True)
class UploadIntentResult:
    """Upload intent read-model."""

    id: str
    tenant_id: str
    kind: str
    case_id: str
    document_id: str
    key: str
    filename: str
    content_type: str
    expected_file_size: int
    expected_version: int
    status: str
    expires_at: datetime
    created_by: str | None
    last_error: str | None
    result: dict[str, Any] | None
    document_version_id: str | None
    finalized_at: datetime | None
    cleaned_at: datetime | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def descriptive_fields(self) -> dict[str, str | None]:
        """Title/category/notes captured at initiate time."""
        result = self.result or {}
        return {k: result.get(k) for k in ("title", "category", "notes")}


@dataclass(frozen=True)
class InitiateUploadCommand:
    """Input for InitiateUpload. Exactly one of document_id / case_id is required."""

    filename: str
    file_size: int
    content_type: str | None = None
    document_id: str | None = None
    case_id: str | None = None
    title: str | None = None
    category: str | None = None
    notes: str | None = None
    intent_id: str | None = None


@dataclass(frozen=True)
class InitiateUploadResult:
    intent_id: str
    upload_url: str
    upload_method: str
    upload_headers: dict[str, str]
    key: str
    case_id: str
    document_id: str
    expected_version: int
    expected_file_size: int
    expected_content_type: str
    expires_at: datetime


@dataclass(frozen=True)
class FinalizeUploadCommand:
    """Input for FinalizeUpload. intent_id is authoritative; key is the fallback lookup."""

    document_id: str
    expected_version: int
    key: str
    filename: str
    intent_id: str | None = None
    case_id: str | None = None
    expected_file_size: int | None = None
    expected_content_type: str | None = None
    title: str | None = None
    category: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class FinalizeUploadResult:
    document_id: str
    version: int
    document_version_id: str | None
    idempotent: bool = False
    intent_id: str | None = None


@dataclass(frozen=True)
class FinalizedUploadCommit:
    """Everything the metadata store writes in one finalize transaction.

    previous_version / previous_file_key describe the document pointer this
    attempt read; the pointer update only applies if it is still there.
    """

    tenant_id: str
    document_id: str
    case_id: str
    is_new_document: bool
    version: int
    key: str
    content_type: str
    file_size: int
    uploader_id: str
    title: str
    category: str | None
    notes: str | None
    intent_id: str | None
    result: dict[str, Any]
    finalized_at: datetime
    previous_version: int | None = None
    previous_file_key: str | None = None


class CommitStatus(str, Enum):
    COMMITTED = "committed"
    UNIQUE_CONFLICT = "unique_conflict"
    STALE_POINTER = "stale_pointer"
    INTENT_CLOSED = "intent_closed"


@dataclass(frozen=True)
class CommitOutcome:
    """Tagged result of the finalize transaction."""

    status: CommitStatus
    document_version_id: str | None = None

    @property
    def committed(self) -> bool:
        return self.status is CommitStatus.COMMITTED


@dataclass(frozen=True)
class UploadIntentPage:
    items: list[UploadIntentResult]
    next_cursor: str | None
    counts: dict[str, int]


@dataclass
class CleanupReport:
    """Summary of one cleanup sweep."""

    take: int
    cutoff: datetime
    dry_run: bool
    recovered: int = 0
    cleaned: int = 0
    expired: int = 0
    failed: int = 0
    deleted_bytes: int = 0
    intent_ids: list[str] = field(default_factory=list)
