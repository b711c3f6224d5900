"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the authenticated actor and the
upload use cases. All use cases are built from infrastructure implementations
here; routes depend only on these dependencies, not on infra directly.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.application.dtos.user import Actor, UserResult
from lawdesk.application.interfaces.repositories import IUploadStore
from lawdesk.application.interfaces.storage import IStorageService
from lawdesk.application.services.authorization_service import AuthorizationService
from lawdesk.application.use_cases.documents import DocumentQueryService
from lawdesk.application.use_cases.uploads import (
    CleanupUploadIntentsUseCase,
    UploadCoordinator,
)
from lawdesk.core.config import get_settings
from lawdesk.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ValidationException,
)
from lawdesk.domain.upload_policy import UploadContentPolicy
from lawdesk.infrastructure.external.storage.factory import StorageFactory
from lawdesk.infrastructure.external.storage.local_storage import LocalStorageService
from lawdesk.infrastructure.persistence.database import get_db, get_session_factory
from lawdesk.infrastructure.persistence.repositories import UserRepository
from lawdesk.infrastructure.persistence.upload_store import SqlUploadStore
from lawdesk.infrastructure.security.jwt import verify_token
from lawdesk.infrastructure.services import CaseAccessResolver

_http_bearer = HTTPBearer(auto_error=False)


# ---- Tenant and caller ----


async def get_tenant_id(request: Request) -> str:
    """Resolve tenant ID from the tenant header (required on every call)."""
    name = get_settings().tenant_header_name
    value = request.headers.get(name)
    if not value:
        raise ValidationException(f"Missing required header: {name}", field=name)
    return value


async def get_user_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRepository:
    return UserRepository(db)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
) -> UserResult:
    """Return current user from JWT; 401 if missing/invalid, 403 if the tenant header disagrees."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    payload = verify_token(credentials.credentials)
    user = await user_repo.get_by_id(payload["sub"])
    if user is None or not user.is_active or user.tenant_id != payload["tenant_id"]:
        raise AuthenticationException("Invalid or inactive user")
    if user.tenant_id != tenant_id:
        raise AuthorizationException(message="Token does not belong to this tenant")
    return user


async def get_actor(
    current_user: Annotated[UserResult, Depends(get_current_user)],
) -> Actor:
    return Actor.from_user(current_user)


# ---- Infrastructure adapters ----


def get_upload_store() -> IUploadStore:
    """SQL unit of work over the process-wide session factory."""
    return SqlUploadStore(get_session_factory())


def get_storage_service() -> IStorageService:
    """Storage backend from settings (local or S3)."""
    return StorageFactory.create_storage_service(get_settings())


def get_local_storage() -> LocalStorageService:
    """Local backend for the token endpoints; 404 when another backend is configured."""
    storage = get_storage_service()
    if not isinstance(storage, LocalStorageService):
        raise HTTPException(status_code=404, detail="Not found")
    return storage


async def get_authorization_service(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthorizationService:
    """Build AuthorizationService with the case access resolver and optional cache.

    Cache is set in app lifespan (app.state.cache) when Redis is enabled;
    otherwise cache is None and case checks hit the DB only.
    """
    settings = get_settings()
    cache = getattr(request.app.state, "cache", None)
    return AuthorizationService(
        case_access_resolver=CaseAccessResolver(db),
        cache=cache,
        cache_ttl=settings.cache_ttl_permissions,
    )


# ---- Use cases ----


def get_upload_coordinator(
    store: Annotated[IUploadStore, Depends(get_upload_store)],
    storage: Annotated[IStorageService, Depends(get_storage_service)],
    authorization: Annotated[AuthorizationService, Depends(get_authorization_service)],
) -> UploadCoordinator:
    settings = get_settings()
    return UploadCoordinator(
        store=store,
        storage=storage,
        authorization=authorization,
        policy=UploadContentPolicy(
            max_bytes=settings.max_upload_bytes,
            allowed_mime_types=settings.allowed_upload_mime_type_set,
        ),
        upload_ttl=timedelta(seconds=settings.presigned_upload_ttl_seconds),
        head_max_attempts=settings.storage_head_max_attempts,
        head_backoff_seconds=settings.storage_head_backoff_seconds,
    )


def get_document_query_service(
    store: Annotated[IUploadStore, Depends(get_upload_store)],
    storage: Annotated[IStorageService, Depends(get_storage_service)],
    authorization: Annotated[AuthorizationService, Depends(get_authorization_service)],
) -> DocumentQueryService:
    return DocumentQueryService(store=store, storage=storage, authorization=authorization)


def get_cleanup_use_case(
    store: Annotated[IUploadStore, Depends(get_upload_store)],
    storage: Annotated[IStorageService, Depends(get_storage_service)],
    authorization: Annotated[AuthorizationService, Depends(get_authorization_service)],
) -> CleanupUploadIntentsUseCase:
    return CleanupUploadIntentsUseCase(
        store=store, storage=storage, authorization=authorization
    )
