"""Domain enumerations for the LawDesk application.

Enums represent fixed sets of domain values (e.g. tenant status).
"""

from enum import Enum


class TenantStatus(str, Enum):
    """Tenant lifecycle status.

    Determines whether a tenant can accept API traffic.
    """

    ACTIVE = "active"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings.

        Returns:
            List of enum value strings (e.g. for validation or serialization).
        """
        return [status.value for status in cls]


class TenantRole(str, Enum):
    """Tenant-wide role of a user. Partners and admins see every case in the tenant."""

    PARTNER = "partner"
    ADMIN = "admin"
    LAWYER = "lawyer"
    TRAINEE = "trainee"
    ASSISTANT = "assistant"
    VIEWER = "viewer"

    @classmethod
    def values(cls) -> list[str]:
        return [role.value for role in cls]

    @property
    def sees_all_cases(self) -> bool:
        return self in (TenantRole.PARTNER, TenantRole.ADMIN)


class UploadIntentStatus(str, Enum):
    """Lifecycle of an upload attempt.

    INITIATED is the only non-terminal state. FINALIZED and FAILED are set by
    the upload coordinator; EXPIRED only by the cleanup sweep.
    """

    INITIATED = "INITIATED"
    FINALIZED = "FINALIZED"
    FAILED = "FAILED"
    EXPIRED = "EXPIRED"

    @classmethod
    def values(cls) -> list[str]:
        return [status.value for status in cls]


class UploadIntentKind(str, Enum):
    """What an upload intent attaches to."""

    DOCUMENT = "document"

    @classmethod
    def values(cls) -> list[str]:
        return [kind.value for kind in cls]
