"""Tenant permission codes and the static role-to-permission map."""

from lawdesk.domain.enums import TenantRole

DOCUMENT_UPLOAD = "document:upload"
DOCUMENT_VIEW = "document:view"
CASE_VIEW = "case:view"
UPLOAD_INTENT_MANAGE = "upload_intent:manage"

_ALL = frozenset({DOCUMENT_UPLOAD, DOCUMENT_VIEW, CASE_VIEW, UPLOAD_INTENT_MANAGE})

ROLE_PERMISSIONS: dict[TenantRole, frozenset[str]] = {
    TenantRole.PARTNER: _ALL,
    TenantRole.ADMIN: _ALL,
    TenantRole.LAWYER: frozenset({DOCUMENT_UPLOAD, DOCUMENT_VIEW, CASE_VIEW}),
    TenantRole.TRAINEE: frozenset({DOCUMENT_UPLOAD, DOCUMENT_VIEW, CASE_VIEW}),
    TenantRole.ASSISTANT: frozenset({DOCUMENT_UPLOAD, DOCUMENT_VIEW, CASE_VIEW}),
    TenantRole.VIEWER: frozenset({DOCUMENT_VIEW, CASE_VIEW}),
}


def role_has_permission(role: str, permission: str) -> bool:
    """Return True if the tenant role grants the permission. Unknown roles grant nothing."""
    try:
        tenant_role = TenantRole(role)
    except ValueError:
        return False
    return permission in ROLE_PERMISSIONS.get(tenant_role, frozenset())


def split_permission(permission: str) -> tuple[str, str]:
    """Split 'resource:action' into its parts (for error details)."""
    resource, _, action = permission.partition(":")
    return resource, action
