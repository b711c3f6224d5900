"""Local filesystem storage with path validation, atomic writes and token URLs.

Stands in for object storage in development: presigned PUT/GET URLs are
in-memory tokens served by the /storage endpoints of this API.
"""

from __future__ import annotations

import json
import os
import secrets
import tempfile
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, cast

import aiofiles
import aiofiles.os

from lawdesk.application.dtos.upload import PresignedUpload, StoredObject
from lawdesk.domain.exceptions import StorageUnavailableError
from lawdesk.infrastructure.exceptions import StorageNotFoundError, StoragePermissionError
from lawdesk.shared.utils.datetime import from_timestamp_utc, utc_now

UPLOAD_PATH = "/api/v1/storage/uploads"
DOWNLOAD_PATH = "/api/v1/storage/downloads"
_META_SUFFIX = ".meta.json"


@dataclass(frozen=True)
class UploadGrant:
    """What a signed local PUT token allows."""

    key: str
    content_type: str
    expires_at: datetime


@dataclass(frozen=True)
class DownloadGrant:
    key: str
    filename: str | None
    expires_at: datetime


class LocalStorageService:
    """Local filesystem storage with atomic writes and path traversal protection.

    Paths are validated against storage_root. Writes use temp file + rename.
    Content type stored in .meta.json sidecar. Signed URLs via in-memory tokens.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    _upload_tokens: dict[str, UploadGrant] = {}
    _download_tokens: dict[str, DownloadGrant] = {}

    def __init__(self, storage_root: str, base_url: str | None = None) -> None:
        """Initialize local storage.

        Args:
            storage_root: Base directory for all files.
            base_url: Base URL for token endpoints (e.g. https://api.example.com).
        """
        self.storage_root = Path(storage_root).resolve()
        self.base_url = base_url.rstrip("/") if base_url else None
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _get_full_path(self, key: str) -> Path:
        """Resolve and validate path under storage_root. Raises StoragePermissionError if traversal."""
        full_path = (self.storage_root / key).resolve()
        try:
            full_path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError(key, "path_validation") from e
        if full_path == self.storage_root or full_path.name.endswith(_META_SUFFIX):
            raise StoragePermissionError(key, "path_validation")
        return full_path

    @staticmethod
    def _meta_path(file_path: Path) -> Path:
        return file_path.with_name(file_path.name + _META_SUFFIX)

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}" if self.base_url else path

    async def _write_metadata(self, file_path: Path, metadata: dict[str, Any]) -> None:
        """Write JSON sidecar."""
        meta_path = self._meta_path(file_path)
        async with aiofiles.open(meta_path, "w") as f:
            await f.write(json.dumps(metadata, indent=2))
        os.chmod(meta_path, 0o640)

    async def _read_metadata(self, file_path: Path) -> dict[str, Any]:
        """Read JSON sidecar or empty dict."""
        meta_path = self._meta_path(file_path)
        if not meta_path.exists():
            return {}
        async with aiofiles.open(meta_path, "r") as f:
            content = await f.read()
            result = json.loads(content)
            return cast(dict[str, Any], result) if isinstance(result, dict) else {}

    async def presign_put_object(
        self,
        key: str,
        content_type: str,
        expires_in: timedelta,
    ) -> PresignedUpload:
        self._get_full_path(key)
        token = secrets.token_urlsafe(32)
        expires_at = utc_now() + expires_in
        self._upload_tokens[token] = UploadGrant(key, content_type, expires_at)
        self._cleanup_expired_tokens()
        return PresignedUpload(
            url=self._url(f"{UPLOAD_PATH}/{token}"),
            method="PUT",
            headers={"Content-Type": content_type},
            expires_at=expires_at,
        )

    def validate_upload_token(self, token: str) -> UploadGrant | None:
        """Return the grant if token valid and not expired."""
        grant = self._upload_tokens.get(token)
        if grant is None:
            return None
        if utc_now() > grant.expires_at:
            del self._upload_tokens[token]
            return None
        return grant

    def consume_upload_token(self, token: str) -> None:
        """Invalidate a PUT token after a successful write."""
        self._upload_tokens.pop(token, None)

    async def write_object(
        self,
        key: str,
        chunks: AsyncIterable[bytes],
        content_type: str,
        max_bytes: int | None = None,
    ) -> StoredObject:
        """Stream chunks to key with temp file + rename. Overwrites like an S3 PUT."""
        target_path = self._get_full_path(key)
        target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
        temp_fd, temp_path = tempfile.mkstemp(dir=target_path.parent, prefix=".tmp_")
        os.close(temp_fd)
        size = 0
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in chunks:
                    size += len(chunk)
                    if max_bytes is not None and size > max_bytes:
                        raise StoragePermissionError(key, "size_limit")
                    await f.write(chunk)
            os.chmod(temp_path, 0o640)
            os.replace(temp_path, target_path)
        except OSError as e:
            raise StorageUnavailableError("put", key, str(e)) from e
        finally:
            if Path(temp_path).exists():
                os.unlink(temp_path)
        await self._write_metadata(
            target_path,
            {"key": key, "content_type": content_type, "size": size, "uploaded_at": utc_now().isoformat()},
        )
        return StoredObject(key=key, content_length=size, content_type=content_type)

    async def head_object(self, key: str) -> StoredObject | None:
        file_path = self._get_full_path(key)
        try:
            stat = file_path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageUnavailableError("head", key, str(e)) from e
        stored = await self._read_metadata(file_path)
        return StoredObject(
            key=key,
            content_length=stat.st_size,
            content_type=stored.get("content_type"),
            last_modified=from_timestamp_utc(stat.st_mtime),
        )

    async def read_object(self, key: str) -> AsyncIterator[bytes]:
        """Stream file content."""
        file_path = self._get_full_path(key)
        if not file_path.exists():
            raise StorageNotFoundError(key)
        async with aiofiles.open(file_path, "rb") as f:
            while True:
                chunk = await f.read(self.CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

    async def delete_object(self, key: str) -> bool:
        """Delete file and metadata. Returns True if deleted."""
        file_path = self._get_full_path(key)
        if not file_path.exists():
            return False
        try:
            await aiofiles.os.remove(file_path)
            meta_path = self._meta_path(file_path)
            if meta_path.exists():
                await aiofiles.os.remove(meta_path)
        except OSError as e:
            raise StorageUnavailableError("delete", key, str(e)) from e
        parent = file_path.parent
        while parent != self.storage_root:
            try:
                if not any(parent.iterdir()):
                    parent.rmdir()
                    parent = parent.parent
                else:
                    break
            except OSError:
                break
        return True

    async def generate_download_url(
        self,
        key: str,
        expiration: timedelta = timedelta(hours=1),
        filename: str | None = None,
    ) -> str:
        """Return temporary download URL (token-based for local)."""
        if not self._get_full_path(key).exists():
            raise StorageNotFoundError(key)
        token = secrets.token_urlsafe(32)
        self._download_tokens[token] = DownloadGrant(key, filename, utc_now() + expiration)
        self._cleanup_expired_tokens()
        return self._url(f"{DOWNLOAD_PATH}/{token}")

    def validate_download_token(self, token: str) -> DownloadGrant | None:
        """Return the grant if token valid and not expired."""
        grant = self._download_tokens.get(token)
        if grant is None:
            return None
        if utc_now() > grant.expires_at:
            del self._download_tokens[token]
            return None
        return grant

    def _cleanup_expired_tokens(self) -> None:
        """Remove expired upload and download tokens."""
        now = utc_now()
        for tokens in (self._upload_tokens, self._download_tokens):
            for token in [t for t, g in tokens.items() if g.expires_at <= now]:
                del tokens[token]
