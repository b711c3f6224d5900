"""User ORM model (tenant-scoped). Authentication is by JWT; the row carries the tenant role."""

from sqlalchemy import Boolean, CheckConstraint, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from lawdesk.domain.enums import TenantRole
from lawdesk.infrastructure.persistence.database import Base
from lawdesk.infrastructure.persistence.models.mixins import MultiTenantModel
from lawdesk.infrastructure.persistence.models.tenant import _in_values_check


class User(MultiTenantModel, Base):
    """User model. Table: app_user. Unique (tenant_id, username) and (tenant_id, email)."""

    __tablename__ = "app_user"

    username: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    role: Mapped[str] = mapped_column(
        String(32), nullable=False, default=TenantRole.LAWYER.value
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "username", name="uq_tenant_username"),
        UniqueConstraint("tenant_id", "email", name="uq_tenant_email"),
        CheckConstraint(
            _in_values_check("role", TenantRole.values()), name="app_user_role_check"
        ),
    )
