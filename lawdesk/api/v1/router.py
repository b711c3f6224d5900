"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from lawdesk.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from lawdesk.api.v1.endpoints import documents, health, storage, upload_intents, uploads

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
api_router.include_router(
    upload_intents.router, prefix="/upload-intents", tags=["upload-intents"]
)
api_router.include_router(storage.router, prefix="/storage", tags=["storage"])
