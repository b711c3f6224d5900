"""Request-scoped tenant and user identifiers.

TenantContextMiddleware sets the tenant id from the tenant header so that
database sessions can run SET LOCAL app.current_tenant_id. The rate limiter
key function reads both values.
"""

from contextvars import ContextVar

current_tenant_id: ContextVar[str | None] = ContextVar(
    "current_tenant_id", default=None
)
current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)


def set_tenant_id(tenant_id: str | None) -> None:
    """Set the current tenant ID for this context (e.g. request)."""
    current_tenant_id.set(tenant_id)


def get_tenant_id() -> str | None:
    """Return the current tenant ID if set."""
    return current_tenant_id.get()


def set_user_id(user_id: str | None) -> None:
    current_user_id.set(user_id)


def get_user_id() -> str | None:
    return current_user_id.get()
