"""Request-scoped context middleware (raw ASGI).

RequestIDMiddleware generates or forwards X-Request-ID. Client-provided
values are sanitized (length + character set) to prevent log injection.

TenantContextMiddleware copies the tenant header and the bearer token's
subject into context variables for the DB session (SET LOCAL) and the
rate limiter key. Authentication itself happens in route dependencies.
"""

import logging
import re
import uuid
from typing import Callable

from lawdesk.core.tenant_context import set_tenant_id, set_user_id
from lawdesk.domain.exceptions import AuthenticationException
from lawdesk.infrastructure.security.jwt import verify_token

logger = logging.getLogger(__name__)

REQUEST_ID_MAX_LENGTH = 64
REQUEST_ID_ALLOWED_PATTERN = re.compile(
    r"^[a-zA-Z0-9_-]{1," + str(REQUEST_ID_MAX_LENGTH) + r"}$"
)


def get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def _sanitize_request_id(raw: str | None) -> str:
    if not raw or not REQUEST_ID_ALLOWED_PATTERN.match(raw.strip()):
        return str(uuid.uuid4())
    return raw.strip()[:REQUEST_ID_MAX_LENGTH]


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    """Add or forward X-Request-ID on each request and response."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = _sanitize_request_id(get_header(scope, header_name))
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((header_name.encode(), request_id.encode()))
                message["headers"] = headers
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app


def _subject_from_authorization(value: str | None) -> str | None:
    if not value or not value.startswith("Bearer "):
        return None
    try:
        return verify_token(value[7:].strip()).get("sub")
    except AuthenticationException:
        return None


def TenantContextMiddleware(app: Callable, header_name: str = "X-Tenant-ID") -> Callable:
    """Set tenant and user context vars for the duration of the request."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        set_tenant_id(get_header(scope, header_name))
        set_user_id(_subject_from_authorization(get_header(scope, "authorization")))
        try:
            await app(scope, receive, send)
        finally:
            set_tenant_id(None)
            set_user_id(None)

    return asgi_app
