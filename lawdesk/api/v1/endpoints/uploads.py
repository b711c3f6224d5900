"""Direct-upload API: initiate returns a signed PUT URL, finalize attaches the stored object."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from lawdesk.api.v1.dependencies import get_actor, get_upload_coordinator
from lawdesk.application.dtos.upload import FinalizeUploadCommand, InitiateUploadCommand
from lawdesk.application.dtos.user import Actor
from lawdesk.application.use_cases.uploads import UploadCoordinator
from lawdesk.core.limiter import limit_upload_finalize, limit_upload_initiate
from lawdesk.schemas.upload import (
    FinalizeUploadRequest,
    FinalizeUploadResponse,
    InitiateUploadRequest,
    InitiateUploadResponse,
)

router = APIRouter()


@router.post("/initiate", response_model=InitiateUploadResponse, status_code=201)
@limit_upload_initiate
async def initiate_upload(
    request: Request,
    body: InitiateUploadRequest,
    actor: Annotated[Actor, Depends(get_actor)],
    coordinator: Annotated[UploadCoordinator, Depends(get_upload_coordinator)],
):
    """Open an upload intent and return where (and how) to PUT the bytes."""
    result = await coordinator.initiate_upload(
        actor, InitiateUploadCommand(**body.model_dump())
    )
    return InitiateUploadResponse.model_validate(result)


@router.post("/finalize", response_model=FinalizeUploadResponse)
@limit_upload_finalize
async def finalize_upload(
    request: Request,
    body: FinalizeUploadRequest,
    actor: Annotated[Actor, Depends(get_actor)],
    coordinator: Annotated[UploadCoordinator, Depends(get_upload_coordinator)],
):
    """Attach the uploaded object as the next document version. Safe to retry."""
    result = await coordinator.finalize_upload(
        actor, FinalizeUploadCommand(**body.model_dump())
    )
    return FinalizeUploadResponse.model_validate(result)
