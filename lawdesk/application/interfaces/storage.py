"""Object storage port (DIP). Implementations: LocalStorageService, S3StorageService."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from lawdesk.application.dtos.upload import PresignedUpload, StoredObject


class IStorageService(Protocol):
    """Protocol for object storage backends (local, S3-compatible).

    head_object may be stale right after a signed PUT; callers retry.
    Backend failures surface as StorageUnavailableError.
    """

    async def presign_put_object(
        self,
        key: str,
        content_type: str,
        expires_in: timedelta,
    ) -> PresignedUpload:
        """Return a signed URL that allows exactly one PUT of key until expiry."""
        ...

    async def head_object(self, key: str) -> StoredObject | None:
        """Return object metadata, or None if the object is not (yet) visible."""
        ...

    async def delete_object(self, key: str) -> bool:
        """Delete object. Returns True if deleted, False if not found."""
        ...

    async def generate_download_url(
        self,
        key: str,
        expiration: timedelta = timedelta(hours=1),
        filename: str | None = None,
    ) -> str:
        """Return temporary download URL (presigned for S3, token URL for local)."""
        ...
