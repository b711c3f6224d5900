"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. Buckets are per (tenant, user, operation);
unauthenticated callers fall back to the remote address.
"""

import os
from collections.abc import Callable

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from lawdesk.core.config import get_settings
from lawdesk.core.constants import (
    OP_UPLOAD_FINALIZE,
    OP_UPLOAD_INITIATE,
    OP_UPLOAD_INTENT_CLEANUP,
    OP_UPLOAD_INTENT_LIST,
)
from lawdesk.core.tenant_context import get_tenant_id, get_user_id


def rate_limit_identity(request: Request) -> str:
    """tenant:user from the request context, else the client address."""
    tenant_id = get_tenant_id()
    user_id = get_user_id()
    if tenant_id and user_id:
        return f"{tenant_id}:{user_id}"
    return f"ip:{get_remote_address(request)}"


def _key_for(operation: str) -> Callable[[Request], str]:
    def key_func(request: Request) -> str:
        return f"{operation}:{rate_limit_identity(request)}"

    return key_func


# Storage URI is read from the environment at import; Settings validation runs later.
limiter = Limiter(
    key_func=rate_limit_identity,
    storage_uri=os.environ.get("RATE_LIMIT_STORAGE_URI", "memory://"),
)

# Limit strings come from Settings when the route is hit, not at import.
limit_upload_initiate = limiter.limit(
    lambda: get_settings().upload_initiate_rate_limit,
    key_func=_key_for(OP_UPLOAD_INITIATE),
)
limit_upload_finalize = limiter.limit(
    lambda: get_settings().upload_finalize_rate_limit,
    key_func=_key_for(OP_UPLOAD_FINALIZE),
)
limit_upload_intent_list = limiter.limit(
    lambda: get_settings().upload_intent_list_rate_limit,
    key_func=_key_for(OP_UPLOAD_INTENT_LIST),
)
limit_upload_intent_cleanup = limiter.limit(
    lambda: get_settings().upload_intent_cleanup_rate_limit,
    key_func=_key_for(OP_UPLOAD_INTENT_CLEANUP),
)
