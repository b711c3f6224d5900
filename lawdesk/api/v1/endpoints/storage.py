"""Local storage token endpoints: targets of signed PUT/GET URLs when STORAGE_BACKEND=local.

Authorization is the token itself, as with S3 presigned URLs.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from lawdesk.api.v1.dependencies import get_local_storage
from lawdesk.core.config import get_settings
from lawdesk.domain.exceptions import ResourceNotFoundException, ValidationException
from lawdesk.domain.upload_policy import normalize_content_type
from lawdesk.infrastructure.external.storage.local_storage import LocalStorageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.put("/uploads/{token}", status_code=200)
async def put_object(
    token: str,
    request: Request,
    storage: Annotated[LocalStorageService, Depends(get_local_storage)],
):
    """Write the request body to the key bound to the token."""
    grant = storage.validate_upload_token(token)
    if grant is None:
        raise ResourceNotFoundException("upload_url", token[:8])
    sent_type = normalize_content_type(request.headers.get("content-type"))
    if sent_type and sent_type != normalize_content_type(grant.content_type):
        raise ValidationException(
            "Content-Type does not match the signed upload", field="content-type"
        )
    stored = await storage.write_object(
        grant.key,
        request.stream(),
        grant.content_type,
        max_bytes=get_settings().max_upload_bytes,
    )
    storage.consume_upload_token(token)
    logger.info("Local upload stored: key=%s bytes=%s", grant.key, stored.content_length)
    return {"key": stored.key, "size": stored.content_length}


@router.get("/downloads/{token}")
async def get_object(
    token: str,
    storage: Annotated[LocalStorageService, Depends(get_local_storage)],
):
    """Stream the object bound to the token."""
    grant = storage.validate_download_token(token)
    if grant is None:
        raise ResourceNotFoundException("download_url", token[:8])
    head = await storage.head_object(grant.key)
    if head is None:
        raise ResourceNotFoundException("object", grant.key)
    headers = {"Content-Length": str(head.content_length)}
    if grant.filename:
        headers["Content-Disposition"] = f'attachment; filename="{grant.filename}"'
    return StreamingResponse(
        storage.read_object(grant.key),
        media_type=head.content_type or "application/octet-stream",
        headers=headers,
    )
