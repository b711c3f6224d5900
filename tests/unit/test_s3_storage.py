"""Unit tests for S3StorageService with a mocked boto3 client."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from lawdesk.domain.exceptions import StorageUnavailableError
from lawdesk.infrastructure.external.storage.s3_storage import S3StorageService


def _client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def s3(client: MagicMock) -> S3StorageService:
    return S3StorageService(bucket="files", client=client)


async def test_presign_put(s3: S3StorageService, client: MagicMock) -> None:
    client.generate_presigned_url.return_value = "https://s3.test/put"
    presigned = await s3.presign_put_object("k", "application/pdf", timedelta(minutes=10))
    assert presigned.url == "https://s3.test/put"
    assert presigned.headers == {"Content-Type": "application/pdf"}
    client.generate_presigned_url.assert_called_once_with(
        "put_object",
        Params={"Bucket": "files", "Key": "k", "ContentType": "application/pdf"},
        ExpiresIn=600,
    )


async def test_head_object(s3: S3StorageService, client: MagicMock) -> None:
    modified = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)
    client.head_object.return_value = {
        "ContentLength": 2048,
        "ContentType": "application/pdf",
        "ETag": '"abc123"',
        "LastModified": modified,
    }
    stored = await s3.head_object("k")
    assert stored.content_length == 2048
    assert stored.content_type == "application/pdf"
    assert stored.etag == "abc123"
    assert stored.last_modified == modified


@pytest.mark.parametrize("code", ["404", "NoSuchKey", "NotFound"])
async def test_head_missing(s3: S3StorageService, client: MagicMock, code: str) -> None:
    client.head_object.side_effect = _client_error(code)
    assert await s3.head_object("k") is None


async def test_head_other_error_is_unavailable(s3: S3StorageService, client: MagicMock) -> None:
    client.head_object.side_effect = _client_error("503")
    with pytest.raises(StorageUnavailableError) as exc_info:
        await s3.head_object("k")
    assert exc_info.value.retryable is True
    assert exc_info.value.details["operation"] == "head"


async def test_delete_existing(s3: S3StorageService, client: MagicMock) -> None:
    client.head_object.return_value = {"ContentLength": 1}
    assert await s3.delete_object("k") is True
    client.delete_object.assert_called_once_with(Bucket="files", Key="k")


async def test_delete_missing(s3: S3StorageService, client: MagicMock) -> None:
    client.head_object.side_effect = _client_error("404")
    assert await s3.delete_object("k") is False
    client.delete_object.assert_not_called()


async def test_download_url_with_filename(s3: S3StorageService, client: MagicMock) -> None:
    client.generate_presigned_url.return_value = "https://s3.test/get"
    url = await s3.generate_download_url("k", timedelta(hours=2), filename="Brief")
    assert url == "https://s3.test/get"
    client.generate_presigned_url.assert_called_once_with(
        "get_object",
        Params={
            "Bucket": "files",
            "Key": "k",
            "ResponseContentDisposition": 'attachment; filename="Brief"',
        },
        ExpiresIn=7200,
    )
