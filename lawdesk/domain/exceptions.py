"""Domain exceptions for the LawDesk application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class LawDeskException(Exception):
    """Base exception for all LawDesk application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        return bool(self.details.get("retryable", False))

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LawDeskException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None, **details_extra: Any) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
            **details_extra: Optional keys merged into details.
        """
        details: dict[str, Any] = {"field": field} if field else {}
        details.update(details_extra)
        details.setdefault("retryable", False)
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(LawDeskException):
    """Raised when authentication fails (e.g. invalid credentials or token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(LawDeskException):
    """Raised when the user lacks required permissions for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'document', 'case').
            action: Optional action that was attempted (e.g. 'upload', 'view').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {"retryable": False}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(LawDeskException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'document', 'case').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id, "retryable": False},
        )


class UnsupportedContentTypeException(LawDeskException):
    """Raised when the upload's MIME type is not on the allow-list."""

    def __init__(self, content_type: str | None, intent_id: str | None = None) -> None:
        details: dict[str, Any] = {"content_type": content_type, "retryable": False}
        if intent_id:
            details["intent_id"] = intent_id
        super().__init__(
            f"Unsupported file type: {content_type or 'unknown'}",
            "UNSUPPORTED_CONTENT_TYPE",
            details,
        )


class UploadException(LawDeskException):
    """Base class for upload protocol failures that reference an intent."""

    def __init__(
        self,
        message: str,
        error_code: str,
        intent_id: str | None = None,
        retryable: bool = False,
        **details_extra: Any,
    ) -> None:
        details: dict[str, Any] = {"retryable": retryable, **details_extra}
        if intent_id:
            details["intent_id"] = intent_id
        super().__init__(message, error_code, details)


class UploadIntentNotFoundException(UploadException):
    """Raised when finalize names an intent id that does not exist in the tenant."""

    def __init__(self, intent_id: str) -> None:
        super().__init__(
            "Upload intent not found; initiate a new upload",
            "UPLOAD_INTENT_NOT_FOUND",
            intent_id=intent_id,
        )


class UploadIntentMismatchException(UploadException):
    """Raised when finalize parameters do not match the recorded intent."""

    def __init__(self, intent_id: str | None, field: str) -> None:
        super().__init__(
            f"Upload does not match its intent ({field})",
            "UPLOAD_INTENT_MISMATCH",
            intent_id=intent_id,
            field=field,
        )


class UploadIntentClosedException(UploadException):
    """Raised when finalize targets an intent that already failed or expired."""

    def __init__(self, intent_id: str, status: str) -> None:
        super().__init__(
            f"Upload intent is {status}; initiate a new upload",
            "UPLOAD_INTENT_CLOSED",
            intent_id=intent_id,
            status=status,
        )


class UploadIntentConflictException(UploadException):
    """Raised when a client-supplied intent id cannot be reused."""

    def __init__(self, intent_id: str, reason: str) -> None:
        super().__init__(
            f"Upload intent {intent_id} cannot be reused: {reason}",
            "UPLOAD_INTENT_CONFLICT",
            intent_id=intent_id,
            reason=reason,
        )


class UploadKeyMismatchException(UploadException):
    """Raised when the object key lies outside the prefix for its target version."""

    def __init__(self, key: str, expected_prefix: str, intent_id: str | None = None) -> None:
        super().__init__(
            "Object key does not belong to this document version",
            "UPLOAD_KEY_MISMATCH",
            intent_id=intent_id,
            key=key,
            expected_prefix=expected_prefix,
        )


class UploadSizeMismatchException(UploadException):
    """Raised when the stored object size differs from the declared size."""

    def __init__(self, expected: int, actual: int, intent_id: str | None = None) -> None:
        super().__init__(
            f"Uploaded size {actual} does not match declared size {expected}",
            "UPLOAD_SIZE_MISMATCH",
            intent_id=intent_id,
            expected=expected,
            actual=actual,
        )


class StorageObjectNotVisibleException(UploadException):
    """Raised when the uploaded object is not (yet) visible in storage."""

    def __init__(self, key: str, attempts: int, intent_id: str | None = None) -> None:
        super().__init__(
            "Uploaded object not found in storage yet; retry finalize",
            "STORAGE_OBJECT_NOT_VISIBLE",
            intent_id=intent_id,
            retryable=True,
            key=key,
            attempts=attempts,
        )


class DocumentVersionConflictException(UploadException):
    """Raised when another upload already claimed the target document version."""

    def __init__(
        self,
        document_id: str,
        expected_version: int,
        current_version: int | None = None,
        intent_id: str | None = None,
    ) -> None:
        super().__init__(
            "Document version was taken by another upload; refresh and upload again",
            "DOCUMENT_VERSION_CONFLICT",
            intent_id=intent_id,
            document_id=document_id,
            expected_version=expected_version,
            current_version=current_version,
        )


class StorageUnavailableError(LawDeskException):
    """Raised by storage adapters when the backend fails or cannot be reached."""

    def __init__(self, operation: str, key: str, reason: str) -> None:
        super().__init__(
            f"Storage {operation} failed for {key}",
            "STORAGE_UNAVAILABLE",
            {"operation": operation, "key": key, "reason": reason, "retryable": True},
        )
