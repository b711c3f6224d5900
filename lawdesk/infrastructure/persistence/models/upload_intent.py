"""UploadIntent ORM model: the ledger of direct-to-storage upload attempts."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from lawdesk.domain.enums import UploadIntentKind, UploadIntentStatus
from lawdesk.infrastructure.persistence.database import Base
from lawdesk.infrastructure.persistence.models.mixins import MultiTenantModel
from lawdesk.infrastructure.persistence.models.tenant import _in_values_check


class UploadIntent(MultiTenantModel, Base):
    """One record per attempted upload. Table: upload_intent.

    document_id is pre-allocated for new documents, so it carries no FK.
    """

    __tablename__ = "upload_intent"

    kind: Mapped[str] = mapped_column(
        String(32), nullable=False, default=UploadIntentKind.DOCUMENT.value
    )
    case_id: Mapped[str] = mapped_column(
        String, ForeignKey("legal_case.id", ondelete="CASCADE"), nullable=False
    )
    document_id: Mapped[str] = mapped_column(String, nullable=False)
    key: Mapped[str] = mapped_column(String(1024), nullable=False)
    filename: Mapped[str] = mapped_column(String(256), nullable=False)
    content_type: Mapped[str] = mapped_column(String(255), nullable=False)
    expected_file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expected_version: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=UploadIntentStatus.INITIATED.value
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    result: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    document_version_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("document_version.id", ondelete="SET NULL"), nullable=True
    )
    finalized_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cleaned_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "key", name="uq_upload_intent_tenant_key"),
        CheckConstraint(
            _in_values_check("status", UploadIntentStatus.values()),
            name="upload_intent_status_check",
        ),
        CheckConstraint(
            _in_values_check("kind", UploadIntentKind.values()),
            name="upload_intent_kind_check",
        ),
        CheckConstraint("expected_version >= 1", name="upload_intent_version_check"),
        CheckConstraint("expected_file_size > 0", name="upload_intent_size_check"),
        Index(
            "ix_upload_intent_tenant_document_version",
            "tenant_id",
            "document_id",
            "expected_version",
        ),
        Index("ix_upload_intent_tenant_status_created", "tenant_id", "status", "created_at"),
        Index("ix_upload_intent_tenant_cleanup", "tenant_id", "status", "expires_at"),
    )
