"""Object key layout for uploaded document versions.

Keys are namespaced by tenant, case, document and version, followed by the
upload attempt id and a sanitized filename:

    tenants/{tenant}/cases/{case}/documents/{document}/v{version}/{attempt}-{filename}

The prefix ends with a slash so that v1/ never matches v10/.
"""

import re
from pathlib import PurePosixPath, PureWindowsPath

MAX_FILENAME_SEGMENT_LENGTH = 128
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_KEY_COMPONENT = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def sanitize_filename(filename: str) -> str:
    """Reduce a client filename to a safe single key segment.

    Strips any directory part, drops control characters and replaces
    everything outside [A-Za-z0-9._-] with an underscore.
    """
    name = PureWindowsPath(PurePosixPath(filename or "").name).name
    name = _CONTROL_CHARS.sub("", name)
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("._")
    if not name:
        return "document"
    return name[:MAX_FILENAME_SEGMENT_LENGTH]


def _component(value: str, label: str) -> str:
    if not _KEY_COMPONENT.fullmatch(value or ""):
        raise ValueError(f"Invalid {label} for object key: {value!r}")
    return value


class ObjectKeyBuilder:
    """Builds object keys and the prefix a finalized key must start with."""

    root = "tenants"

    def key_prefix(
        self,
        tenant_id: str,
        case_id: str,
        document_id: str,
        version: int,
    ) -> str:
        if version < 1:
            raise ValueError("version must be >= 1")
        return (
            f"{self.root}/{_component(tenant_id, 'tenant_id')}"
            f"/cases/{_component(case_id, 'case_id')}"
            f"/documents/{_component(document_id, 'document_id')}"
            f"/v{version}/"
        )

    def build_key(
        self,
        tenant_id: str,
        case_id: str,
        document_id: str,
        version: int,
        attempt_id: str,
        filename: str,
    ) -> str:
        """Deterministic key for one upload attempt of a document version."""
        prefix = self.key_prefix(tenant_id, case_id, document_id, version)
        return f"{prefix}{_component(attempt_id, 'attempt_id')}-{sanitize_filename(filename)}"

    def key_matches(
        self,
        key: str,
        tenant_id: str,
        case_id: str,
        document_id: str,
        version: int,
    ) -> bool:
        """True if key lies under the prefix for (tenant, case, document, version)."""
        try:
            prefix = self.key_prefix(tenant_id, case_id, document_id, version)
        except ValueError:
            return False
        if not key.startswith(prefix):
            return False
        remainder = key[len(prefix):]
        return bool(remainder) and "/" not in remainder
