"""Request body size limit middleware.

Rejects requests whose body exceeds the configured maximum. JSON API calls
get a small limit; the local storage upload route gets the upload limit.
Enforces the limit for both Content-Length and Transfer-Encoding: chunked.
Uses raw ASGI (no BaseHTTPMiddleware) for production-safe streaming.
"""

import json
from typing import Any, Callable

from lawdesk.middleware.request_context import get_header


async def _send_413(send: Callable, max_bytes: int, actual: int | None = None) -> None:
    """Send 413 Payload Too Large response."""
    details: dict[str, Any] = {"max_bytes": max_bytes}
    if actual is not None:
        details["content_length"] = actual
    body = json.dumps(
        {
            "error": "PAYLOAD_TOO_LARGE",
            "message": f"Request body must be at most {max_bytes} bytes",
            "details": details,
        }
    ).encode()
    await send({
        "type": "http.response.start",
        "status": 413,
        "headers": [(b"content-type", b"application/json")],
    })
    await send({"type": "http.response.body", "body": body, "more_body": False})


def _limit_for_path(path: str, max_bytes: int, path_limits: dict[str, int]) -> int:
    for prefix, limit in path_limits.items():
        if path.startswith(prefix):
            return limit
    return max_bytes


def RequestSizeLimitMiddleware(
    app: Callable,
    max_bytes: int,
    path_limits: dict[str, int] | None = None,
) -> Callable:
    """Reject requests whose body exceeds the limit for their path.

    Args:
        app: Wrapped ASGI app.
        max_bytes: Default limit.
        path_limits: Optional {path_prefix: limit} overrides.
    """
    overrides = path_limits or {}

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        limit = _limit_for_path(scope.get("path", ""), max_bytes, overrides)

        content_length_str = get_header(scope, "content-length")
        if content_length_str:
            try:
                length = int(content_length_str)
            except ValueError:
                length = None
            if length is not None and length > limit:
                await _send_413(send, limit, length)
                return

        received = 0

        async def counting_receive() -> dict:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    raise _BodyTooLarge(received)
            return message

        try:
            await app(scope, counting_receive, send)
        except _BodyTooLarge as exc:
            await _send_413(send, limit, exc.received)

    return asgi_app


class _BodyTooLarge(Exception):
    def __init__(self, received: int) -> None:
        self.received = received
        super().__init__(f"body exceeded limit after {received} bytes")
