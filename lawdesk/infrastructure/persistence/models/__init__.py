"""Persistence models: ORM entities and mixins."""

from lawdesk.infrastructure.persistence.models.document import Document, DocumentVersion
from lawdesk.infrastructure.persistence.models.legal_case import CaseMember, LegalCase
from lawdesk.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    SoftDeleteMixin,
    TenantMixin,
    TimestampMixin,
)
from lawdesk.infrastructure.persistence.models.tenant import Tenant
from lawdesk.infrastructure.persistence.models.upload_intent import UploadIntent
from lawdesk.infrastructure.persistence.models.user import User

__all__ = [
    "CaseMember",
    "CuidMixin",
    "Document",
    "DocumentVersion",
    "LegalCase",
    "MultiTenantModel",
    "SoftDeleteMixin",
    "TenantMixin",
    "Tenant",
    "TimestampMixin",
    "UploadIntent",
    "User",
]
