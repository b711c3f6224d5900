"""Document API: metadata, version history and signed download links."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from lawdesk.api.v1.dependencies import get_actor, get_document_query_service
from lawdesk.application.dtos.user import Actor
from lawdesk.application.use_cases.documents import DocumentQueryService
from lawdesk.schemas.document import (
    DocumentDownloadUrlResponse,
    DocumentResponse,
    DocumentVersionItem,
)

router = APIRouter()


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    actor: Annotated[Actor, Depends(get_actor)],
    query_svc: Annotated[DocumentQueryService, Depends(get_document_query_service)],
):
    document = await query_svc.get_document(actor, document_id)
    return DocumentResponse.model_validate(document)


@router.get("/{document_id}/versions", response_model=list[DocumentVersionItem])
async def list_document_versions(
    document_id: str,
    actor: Annotated[Actor, Depends(get_actor)],
    query_svc: Annotated[DocumentQueryService, Depends(get_document_query_service)],
):
    """Version history, oldest first."""
    versions = await query_svc.list_versions(actor, document_id)
    return [DocumentVersionItem.model_validate(v) for v in versions]


@router.get(
    "/{document_id}/versions/{version_id}/download-url",
    response_model=DocumentDownloadUrlResponse,
)
async def get_version_download_url(
    document_id: str,
    version_id: str,
    actor: Annotated[Actor, Depends(get_actor)],
    query_svc: Annotated[DocumentQueryService, Depends(get_document_query_service)],
    expires_in_hours: int = Query(1, ge=1, le=168),
):
    """Signed GET link for one version."""
    link = await query_svc.get_version_download_url(
        actor, document_id, version_id, expires_in_hours=expires_in_hours
    )
    return DocumentDownloadUrlResponse.model_validate(link)
