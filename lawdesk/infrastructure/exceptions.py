"""Infrastructure exceptions for storage and external operations.

Local backend errors extend LawDeskException so presentation can map them
to HTTP responses consistently.
"""

from lawdesk.domain.exceptions import LawDeskException


class StorageException(LawDeskException):
    """Base exception for storage operations."""


class StorageNotFoundError(StorageException):
    """File or object not found in storage."""

    def __init__(self, file_path: str) -> None:
        super().__init__(
            f"File not found: {file_path}",
            "STORAGE_NOT_FOUND",
            {"file_path": file_path},
        )


class StoragePermissionError(StorageException):
    """Path escapes the storage root or the token is not valid for the key."""

    def __init__(self, file_path: str, operation: str) -> None:
        super().__init__(
            f"Permission denied for {operation} on {file_path}",
            "STORAGE_PERMISSION_ERROR",
            {"file_path": file_path, "operation": operation},
        )
