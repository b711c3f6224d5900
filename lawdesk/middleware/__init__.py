"""HTTP middleware: request size limit, request ID, tenant context.

Applied in main app; order matters (first added = outermost).
"""

from lawdesk.middleware.request_context import RequestIDMiddleware, TenantContextMiddleware
from lawdesk.middleware.request_size_limit import RequestSizeLimitMiddleware

__all__ = [
    "RequestIDMiddleware",
    "RequestSizeLimitMiddleware",
    "TenantContextMiddleware",
]
