"""Pydantic request/response schemas for the API."""

from lawdesk.schemas.document import (
    DocumentDownloadUrlResponse,
    DocumentResponse,
    DocumentVersionItem,
)
from lawdesk.schemas.health import HealthResponse
from lawdesk.schemas.upload import (
    FinalizeUploadRequest,
    FinalizeUploadResponse,
    InitiateUploadRequest,
    InitiateUploadResponse,
)
from lawdesk.schemas.upload_intent import (
    UploadIntentCleanupRequest,
    UploadIntentCleanupResponse,
    UploadIntentItem,
    UploadIntentListResponse,
)

__all__ = [
    "DocumentDownloadUrlResponse",
    "DocumentResponse",
    "DocumentVersionItem",
    "FinalizeUploadRequest",
    "FinalizeUploadResponse",
    "HealthResponse",
    "InitiateUploadRequest",
    "InitiateUploadResponse",
    "UploadIntentCleanupRequest",
    "UploadIntentCleanupResponse",
    "UploadIntentItem",
    "UploadIntentListResponse",
]
