"""Shared utilities: datetime, generators, sanitization."""

from lawdesk.shared.utils.datetime import ensure_utc, from_timestamp_utc, utc_now
from lawdesk.shared.utils.generators import generate_cuid, is_valid_identifier
from lawdesk.shared.utils.sanitization import sanitize_text

__all__ = [
    "ensure_utc",
    "from_timestamp_utc",
    "generate_cuid",
    "is_valid_identifier",
    "sanitize_text",
    "utc_now",
]
