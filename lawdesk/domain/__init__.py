"""Domain layer: enums, permissions, upload key layout and content rules, exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from lawdesk.domain.enums import TenantRole, TenantStatus, UploadIntentKind, UploadIntentStatus
from lawdesk.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    DocumentVersionConflictException,
    LawDeskException,
    ResourceNotFoundException,
    StorageObjectNotVisibleException,
    StorageUnavailableError,
    UnsupportedContentTypeException,
    UploadIntentClosedException,
    UploadIntentConflictException,
    UploadIntentMismatchException,
    UploadIntentNotFoundException,
    UploadKeyMismatchException,
    UploadSizeMismatchException,
    ValidationException,
)

__all__ = [
    # Enums
    "TenantRole",
    "TenantStatus",
    "UploadIntentKind",
    "UploadIntentStatus",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "DocumentVersionConflictException",
    "LawDeskException",
    "ResourceNotFoundException",
    "StorageObjectNotVisibleException",
    "StorageUnavailableError",
    "UnsupportedContentTypeException",
    "UploadIntentClosedException",
    "UploadIntentConflictException",
    "UploadIntentMismatchException",
    "UploadIntentNotFoundException",
    "UploadKeyMismatchException",
    "UploadSizeMismatchException",
    "ValidationException",
]
