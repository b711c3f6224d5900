"""S3-compatible object storage (AWS S3, MinIO, etc.) for direct client uploads."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from lawdesk.application.dtos.upload import PresignedUpload, StoredObject
from lawdesk.domain.exceptions import StorageUnavailableError
from lawdesk.shared.utils.datetime import ensure_utc, utc_now

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3StorageService:
    """S3-compatible storage with presigned PUT/GET URLs.

    Uses boto3 (sync) via asyncio.to_thread for async API. Compatible with
    AWS S3, MinIO, DigitalOcean Spaces. Bytes never pass through the API.
    """

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        client: Any = None,
    ) -> None:
        """Initialize S3 client.

        Args:
            bucket: Bucket name.
            region: AWS region.
            endpoint_url: Custom endpoint (MinIO/Spaces).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            client: Pre-built boto3 client (tests).
        """
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        if client is not None:
            self._client = client
            return
        extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
        self._client = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            **extra,
        )

    async def presign_put_object(
        self,
        key: str,
        content_type: str,
        expires_in: timedelta,
    ) -> PresignedUpload:
        """Signed PUT bound to key and Content-Type."""
        seconds = int(expires_in.total_seconds())

        def _presign() -> str:
            return self._client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=seconds,
            )

        try:
            url = await asyncio.to_thread(_presign)
        except (ClientError, BotoCoreError) as e:
            raise StorageUnavailableError("presign_put", key, str(e)) from e
        return PresignedUpload(
            url=url,
            method="PUT",
            headers={"Content-Type": content_type},
            expires_at=utc_now() + timedelta(seconds=seconds),
        )

    async def head_object(self, key: str) -> StoredObject | None:
        """Return size/type/etag, or None on 404."""
        def _head() -> dict[str, Any] | None:
            try:
                return self._client.head_object(Bucket=self.bucket, Key=key)
            except ClientError as e:
                if _error_code(e) in _NOT_FOUND_CODES:
                    return None
                raise

        try:
            head = await asyncio.to_thread(_head)
        except (ClientError, BotoCoreError) as e:
            raise StorageUnavailableError("head", key, str(e)) from e
        if head is None:
            return None
        etag = head.get("ETag")
        return StoredObject(
            key=key,
            content_length=int(head["ContentLength"]),
            content_type=head.get("ContentType"),
            etag=etag.strip('"') if etag else None,
            last_modified=ensure_utc(head.get("LastModified")),
        )

    async def delete_object(self, key: str) -> bool:
        """Delete object. Returns True if deleted, False if it was not there."""
        def _delete() -> bool:
            try:
                self._client.head_object(Bucket=self.bucket, Key=key)
            except ClientError as e:
                if _error_code(e) in _NOT_FOUND_CODES:
                    return False
                raise
            self._client.delete_object(Bucket=self.bucket, Key=key)
            return True

        try:
            return await asyncio.to_thread(_delete)
        except (ClientError, BotoCoreError) as e:
            raise StorageUnavailableError("delete", key, str(e)) from e

    async def generate_download_url(
        self,
        key: str,
        expiration: timedelta = timedelta(hours=1),
        filename: str | None = None,
    ) -> str:
        """Return presigned GET URL."""
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key}
        if filename:
            params["ResponseContentDisposition"] = f'attachment; filename="{filename}"'

        def _presign() -> str:
            return self._client.generate_presigned_url(
                "get_object",
                Params=params,
                ExpiresIn=int(expiration.total_seconds()),
            )

        try:
            return await asyncio.to_thread(_presign)
        except (ClientError, BotoCoreError) as e:
            raise StorageUnavailableError("presign_get", key, str(e)) from e
