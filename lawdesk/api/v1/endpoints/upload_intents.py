"""Upload intent ledger API (operators): listing and the cleanup sweep."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from lawdesk.api.v1.dependencies import (
    get_actor,
    get_cleanup_use_case,
    get_document_query_service,
)
from lawdesk.application.dtos.user import Actor
from lawdesk.application.use_cases.documents import DocumentQueryService
from lawdesk.application.use_cases.uploads import CleanupUploadIntentsUseCase
from lawdesk.core.config import get_settings
from lawdesk.core.limiter import limit_upload_intent_cleanup, limit_upload_intent_list
from lawdesk.schemas.upload_intent import (
    UploadIntentCleanupRequest,
    UploadIntentCleanupResponse,
    UploadIntentItem,
    UploadIntentListResponse,
)

router = APIRouter()


@router.get("", response_model=UploadIntentListResponse)
@limit_upload_intent_list
async def list_upload_intents(
    request: Request,
    actor: Annotated[Actor, Depends(get_actor)],
    query_svc: Annotated[DocumentQueryService, Depends(get_document_query_service)],
    status: str | None = Query(None, max_length=16),
    q: str | None = Query(None, max_length=256),
    take: int = Query(100, ge=1, le=200),
    cursor: str | None = Query(None, max_length=64),
):
    """Newest first; pass next_cursor back as cursor for the next page."""
    page = await query_svc.list_upload_intents(
        actor, status=status, query=q, take=take, cursor=cursor
    )
    return UploadIntentListResponse(
        items=[UploadIntentItem.model_validate(i) for i in page.items],
        next_cursor=page.next_cursor,
        counts=page.counts,
    )


@router.post("/cleanup", response_model=UploadIntentCleanupResponse)
@limit_upload_intent_cleanup
async def cleanup_upload_intents(
    request: Request,
    body: UploadIntentCleanupRequest,
    actor: Annotated[Actor, Depends(get_actor)],
    cleanup: Annotated[CleanupUploadIntentsUseCase, Depends(get_cleanup_use_case)],
):
    """Reclaim objects of abandoned uploads in the caller's tenant."""
    settings = get_settings()
    report = await cleanup.run_for_actor(
        actor,
        take=body.take or settings.upload_intent_cleanup_batch_size,
        grace_minutes=(
            body.grace_minutes
            if body.grace_minutes is not None
            else settings.upload_intent_cleanup_grace_minutes
        ),
        dry_run=body.dry_run,
    )
    return UploadIntentCleanupResponse.model_validate(report)
