"""Initial schema: tenants, users, cases, documents, versions, upload intents

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c2e3f4b5d6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _tenant_fk() -> sa.Column:
    return sa.Column(
        "tenant_id",
        sa.String(),
        sa.ForeignKey("tenant.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    """Create the upload schema."""
    op.create_table(
        "tenant",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('active', 'suspended', 'archived')", name="tenant_status_check"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_tenant_code"), "tenant", ["code"], unique=True)
    op.create_index(op.f("ix_tenant_status"), "tenant", ["status"], unique=False)

    op.create_table(
        "app_user",
        sa.Column("id", sa.String(), nullable=False),
        _tenant_fk(),
        sa.Column("username", sa.String(150), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column(
            "is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "role IN ('partner', 'admin', 'lawyer', 'trainee', 'assistant', 'viewer')",
            name="app_user_role_check",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "username", name="uq_tenant_username"),
        sa.UniqueConstraint("tenant_id", "email", name="uq_tenant_email"),
    )
    op.create_index(op.f("ix_app_user_tenant_id"), "app_user", ["tenant_id"], unique=False)

    op.create_table(
        "legal_case",
        sa.Column("id", sa.String(), nullable=False),
        _tenant_fk(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_legal_case_tenant_id"), "legal_case", ["tenant_id"], unique=False)
    op.create_index(op.f("ix_legal_case_deleted_at"), "legal_case", ["deleted_at"], unique=False)

    op.create_table(
        "case_member",
        sa.Column("id", sa.String(), nullable=False),
        _tenant_fk(),
        sa.Column(
            "case_id",
            sa.String(),
            sa.ForeignKey("legal_case.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(),
            sa.ForeignKey("app_user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("case_id", "user_id", name="uq_case_member_case_user"),
    )
    op.create_index(op.f("ix_case_member_tenant_id"), "case_member", ["tenant_id"], unique=False)
    op.create_index(
        "ix_case_member_tenant_user", "case_member", ["tenant_id", "user_id"], unique=False
    )

    op.create_table(
        "document",
        sa.Column("id", sa.String(), nullable=False),
        _tenant_fk(),
        sa.Column(
            "case_id",
            sa.String(),
            sa.ForeignKey("legal_case.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("file_key", sa.String(1024), nullable=True),
        sa.Column("content_type", sa.String(255), nullable=True),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column(
            "uploader_id",
            sa.String(),
            sa.ForeignKey("app_user.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_document_tenant_id"), "document", ["tenant_id"], unique=False)
    op.create_index(op.f("ix_document_deleted_at"), "document", ["deleted_at"], unique=False)
    op.create_index("ix_document_tenant_case", "document", ["tenant_id", "case_id"], unique=False)

    op.create_table(
        "document_version",
        sa.Column("id", sa.String(), nullable=False),
        _tenant_fk(),
        sa.Column(
            "document_id",
            sa.String(),
            sa.ForeignKey("document.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("file_key", sa.String(1024), nullable=False),
        sa.Column("content_type", sa.String(255), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column(
            "uploader_id",
            sa.String(),
            sa.ForeignKey("app_user.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "document_id", "version", name="uq_document_version_document_version"
        ),
    )
    op.create_index(
        op.f("ix_document_version_tenant_id"), "document_version", ["tenant_id"], unique=False
    )
    op.create_index(
        "ix_document_version_tenant_key",
        "document_version",
        ["tenant_id", "file_key"],
        unique=False,
    )

    op.create_table(
        "upload_intent",
        sa.Column("id", sa.String(), nullable=False),
        _tenant_fk(),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column(
            "case_id",
            sa.String(),
            sa.ForeignKey("legal_case.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("document_id", sa.String(), nullable=False),
        sa.Column("key", sa.String(1024), nullable=False),
        sa.Column("filename", sa.String(256), nullable=False),
        sa.Column("content_type", sa.String(255), nullable=False),
        sa.Column("expected_file_size", sa.BigInteger(), nullable=False),
        sa.Column("expected_version", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_by",
            sa.String(),
            sa.ForeignKey("app_user.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("result", sa.JSON(), nullable=True),
        sa.Column(
            "document_version_id",
            sa.String(),
            sa.ForeignKey("document_version.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("finalized_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cleaned_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('INITIATED', 'FINALIZED', 'FAILED', 'EXPIRED')",
            name="upload_intent_status_check",
        ),
        sa.CheckConstraint("kind IN ('document')", name="upload_intent_kind_check"),
        sa.CheckConstraint("expected_version >= 1", name="upload_intent_version_check"),
        sa.CheckConstraint("expected_file_size > 0", name="upload_intent_size_check"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "key", name="uq_upload_intent_tenant_key"),
    )
    op.create_index(
        op.f("ix_upload_intent_tenant_id"), "upload_intent", ["tenant_id"], unique=False
    )
    op.create_index(
        "ix_upload_intent_tenant_document_version",
        "upload_intent",
        ["tenant_id", "document_id", "expected_version"],
        unique=False,
    )
    op.create_index(
        "ix_upload_intent_tenant_status_created",
        "upload_intent",
        ["tenant_id", "status", "created_at"],
        unique=False,
    )
    op.create_index(
        "ix_upload_intent_tenant_cleanup",
        "upload_intent",
        ["tenant_id", "status", "expires_at"],
        unique=False,
    )


def downgrade() -> None:
    """Drop the upload schema."""
    op.drop_table("upload_intent")
    op.drop_table("document_version")
    op.drop_table("document")
    op.drop_table("case_member")
    op.drop_table("legal_case")
    op.drop_table("app_user")
    op.drop_table("tenant")
