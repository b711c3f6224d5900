"""Case and case membership ORM models (read by the case access resolver)."""

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lawdesk.infrastructure.persistence.database import Base
from lawdesk.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    SoftDeleteMixin,
)


class LegalCase(MultiTenantModel, SoftDeleteMixin, Base):
    """Legal case (matter). Table: legal_case."""

    __tablename__ = "legal_case"

    title: Mapped[str] = mapped_column(String(200), nullable=False)


class CaseMember(MultiTenantModel, Base):
    """Membership of a user on a case. Table: case_member."""

    __tablename__ = "case_member"

    case_id: Mapped[str] = mapped_column(
        String, ForeignKey("legal_case.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("case_id", "user_id", name="uq_case_member_case_user"),
        Index("ix_case_member_tenant_user", "tenant_id", "user_id"),
    )
