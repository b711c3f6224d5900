"""Application use cases: one entry point per workflow."""

from lawdesk.application.use_cases.documents import DocumentQueryService
from lawdesk.application.use_cases.uploads import (
    CleanupUploadIntentsUseCase,
    UploadCoordinator,
)

__all__ = [
    "CleanupUploadIntentsUseCase",
    "DocumentQueryService",
    "UploadCoordinator",
]
