"""Persistence repositories. Re-exports for dependency injection."""

from lawdesk.infrastructure.persistence.repositories.base import (
    BaseRepository,
    is_unique_violation,
)
from lawdesk.infrastructure.persistence.repositories.case_repo import CaseRepository
from lawdesk.infrastructure.persistence.repositories.document_repo import DocumentRepository
from lawdesk.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from lawdesk.infrastructure.persistence.repositories.upload_intent_repo import (
    UploadIntentRepository,
)
from lawdesk.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "CaseRepository",
    "DocumentRepository",
    "TenantRepository",
    "UploadIntentRepository",
    "UserRepository",
    "is_unique_violation",
]
