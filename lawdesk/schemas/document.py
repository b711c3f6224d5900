"""Document API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class DocumentResponse(BaseModel):
    """Response for GET /documents/{document_id}."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    case_id: str
    title: str
    category: str | None = None
    notes: str | None = None
    file_key: str | None = None
    content_type: str | None = None
    file_size: int | None = None
    version: int
    uploader_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DocumentVersionItem(BaseModel):
    """Document version in version history."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    document_id: str
    version: int
    file_key: str
    content_type: str
    file_size: int
    uploader_id: str | None = None
    created_at: datetime | None = None


class DocumentDownloadUrlResponse(BaseModel):
    """Response for GET /{document_id}/versions/{version_id}/download-url."""

    model_config = ConfigDict(from_attributes=True)

    document_id: str
    version: int
    url: str
    expires_at: datetime
