"""Upload intent ledger API schemas (operator views)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UploadIntentItem(BaseModel):
    """One ledger row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
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
    created_by: str | None = None
    last_error: str | None = None
    result: dict[str, Any] | None = None
    document_version_id: str | None = None
    finalized_at: datetime | None = None
    cleaned_at: datetime | None = None
    created_at: datetime | None = None


class UploadIntentListResponse(BaseModel):
    """Response for GET /upload-intents."""

    items: list[UploadIntentItem]
    next_cursor: str | None = None
    counts: dict[str, int]


class UploadIntentCleanupRequest(BaseModel):
    """Request body for POST /upload-intents/cleanup."""

    model_config = ConfigDict(extra="forbid")

    take: int | None = Field(default=None, ge=1, le=500)
    grace_minutes: int | None = Field(default=None, ge=0, le=43200)
    dry_run: bool = False


class UploadIntentCleanupResponse(BaseModel):
    """Summary of one cleanup sweep."""

    model_config = ConfigDict(from_attributes=True)

    take: int
    cutoff: datetime
    dry_run: bool
    recovered: int
    cleaned: int
    expired: int
    failed: int
    deleted_bytes: int
