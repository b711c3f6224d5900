"""Document and DocumentVersion ORM models.

Document holds the current-version pointer (file_key, version, ...);
DocumentVersion is the append-only history, unique per (document_id, version).
"""

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lawdesk.infrastructure.persistence.database import Base
from lawdesk.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    SoftDeleteMixin,
)


class Document(MultiTenantModel, SoftDeleteMixin, Base):
    """Document entity. Table: document. Belongs to exactly one case."""

    __tablename__ = "document"

    case_id: Mapped[str] = mapped_column(
        String, ForeignKey("legal_case.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_key: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    content_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    uploader_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (Index("ix_document_tenant_case", "tenant_id", "case_id"),)


class DocumentVersion(MultiTenantModel, Base):
    """Immutable history row. Table: document_version."""

    __tablename__ = "document_version"

    document_id: Mapped[str] = mapped_column(
        String, ForeignKey("document.id", ondelete="CASCADE"), nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    file_key: Mapped[str] = mapped_column(String(1024), nullable=False)
    content_type: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    uploader_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "document_id", "version", name="uq_document_version_document_version"
        ),
        Index("ix_document_version_tenant_key", "tenant_id", "file_key"),
    )
