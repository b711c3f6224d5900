"""Unit tests for LocalStorageService (token URLs, atomic writes, path validation)."""

from datetime import timedelta
from pathlib import Path

import pytest

from lawdesk.infrastructure.exceptions import StorageNotFoundError, StoragePermissionError
from lawdesk.infrastructure.external.storage.local_storage import (
    DOWNLOAD_PATH,
    UPLOAD_PATH,
    LocalStorageService,
)

KEY = "tenants/t1/cases/c1/documents/d1/v1/i1-brief.pdf"


async def _chunks(*parts: bytes):
    for part in parts:
        yield part


@pytest.fixture
def local(tmp_path: Path) -> LocalStorageService:
    return LocalStorageService(str(tmp_path), base_url="http://api.test/")


async def _collect(local: LocalStorageService, key: str) -> bytes:
    return b"".join([chunk async for chunk in local.read_object(key)])


async def test_presign_put_token(local: LocalStorageService) -> None:
    presigned = await local.presign_put_object(KEY, "application/pdf", timedelta(minutes=10))
    assert presigned.method == "PUT"
    assert presigned.headers == {"Content-Type": "application/pdf"}
    assert presigned.url.startswith(f"http://api.test{UPLOAD_PATH}/")
    token = presigned.url.rsplit("/", 1)[1]
    grant = local.validate_upload_token(token)
    assert grant is not None
    assert grant.key == KEY
    local.consume_upload_token(token)
    assert local.validate_upload_token(token) is None


async def test_expired_upload_token(local: LocalStorageService) -> None:
    presigned = await local.presign_put_object(KEY, "application/pdf", timedelta(seconds=-1))
    assert local.validate_upload_token(presigned.url.rsplit("/", 1)[1]) is None


async def test_write_head_read_delete(local: LocalStorageService, tmp_path: Path) -> None:
    stored = await local.write_object(KEY, _chunks(b"%PDF-", b"1.7"), "application/pdf")
    assert stored.content_length == 8

    head = await local.head_object(KEY)
    assert head is not None
    assert head.content_length == 8
    assert head.content_type == "application/pdf"
    assert head.last_modified is not None

    assert await _collect(local, KEY) == b"%PDF-1.7"

    assert await local.delete_object(KEY) is True
    assert await local.head_object(KEY) is None
    assert await local.delete_object(KEY) is False
    assert list(tmp_path.iterdir()) == []


async def test_write_overwrites(local: LocalStorageService) -> None:
    await local.write_object(KEY, _chunks(b"first"), "text/plain")
    await local.write_object(KEY, _chunks(b"second!"), "application/pdf")
    head = await local.head_object(KEY)
    assert head.content_length == 7
    assert head.content_type == "application/pdf"


async def test_write_over_limit_leaves_nothing(local: LocalStorageService) -> None:
    with pytest.raises(StoragePermissionError) as exc_info:
        await local.write_object(KEY, _chunks(b"abc", b"def"), "text/plain", max_bytes=4)
    assert exc_info.value.details["operation"] == "size_limit"
    assert await local.head_object(KEY) is None


@pytest.mark.parametrize("key", ["../outside.pdf", "a/../../outside.pdf", "brief.pdf.meta.json", ""])
async def test_rejects_unsafe_keys(local: LocalStorageService, key: str) -> None:
    with pytest.raises(StoragePermissionError):
        await local.head_object(key)


async def test_read_missing_object(local: LocalStorageService) -> None:
    with pytest.raises(StorageNotFoundError):
        await _collect(local, KEY)


async def test_download_url(local: LocalStorageService) -> None:
    await local.write_object(KEY, _chunks(b"x"), "application/pdf")
    url = await local.generate_download_url(KEY, timedelta(minutes=5), filename="Brief")
    assert url.startswith(f"http://api.test{DOWNLOAD_PATH}/")
    grant = local.validate_download_token(url.rsplit("/", 1)[1])
    assert grant.key == KEY
    assert grant.filename == "Brief"


async def test_download_url_for_missing_object(local: LocalStorageService) -> None:
    with pytest.raises(StorageNotFoundError):
        await local.generate_download_url(KEY)


def test_relative_urls_without_base_url(tmp_path: Path) -> None:
    assert LocalStorageService(str(tmp_path))._url("/x") == "/x"
