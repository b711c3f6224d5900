"""Read side: document metadata, version history, signed download links, intent listing."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from lawdesk.application.dtos.document import (
    DocumentDownloadLink,
    DocumentResult,
    DocumentVersionResult,
)
from lawdesk.application.dtos.upload import UploadIntentPage
from lawdesk.application.dtos.user import Actor
from lawdesk.application.interfaces.repositories import IUploadStore
from lawdesk.application.interfaces.storage import IStorageService
from lawdesk.application.services.authorization_service import AuthorizationService
from lawdesk.domain.enums import UploadIntentStatus
from lawdesk.domain.exceptions import ResourceNotFoundException, ValidationException
from lawdesk.domain.permissions import DOCUMENT_VIEW, UPLOAD_INTENT_MANAGE
from lawdesk.domain.upload_keys import sanitize_filename
from lawdesk.shared.utils.datetime import utc_now

MAX_PAGE_SIZE = 200
MAX_DOWNLOAD_HOURS = 168


class DocumentQueryService:
    """Single responsibility: read documents and the upload ledger for a tenant."""

    def __init__(
        self,
        store: IUploadStore,
        storage: IStorageService,
        authorization: AuthorizationService,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.storage = storage
        self.authorization = authorization
        self._clock = clock

    async def get_document(self, actor: Actor, document_id: str) -> DocumentResult:
        """Return document metadata; raises ResourceNotFoundException if missing."""
        self.authorization.require_permission(actor, DOCUMENT_VIEW)
        async with self.store.transaction() as repos:
            document = await repos.documents.get_by_id(actor.tenant_id, document_id)
        if document is None:
            raise ResourceNotFoundException("document", document_id)
        await self.authorization.require_case_access(actor, document.case_id)
        return document

    async def list_versions(
        self, actor: Actor, document_id: str
    ) -> list[DocumentVersionResult]:
        """Return the document's version history, oldest first."""
        await self.get_document(actor, document_id)
        async with self.store.transaction() as repos:
            return await repos.documents.list_versions(actor.tenant_id, document_id)

    async def get_version_download_url(
        self,
        actor: Actor,
        document_id: str,
        version_id: str,
        expires_in_hours: int = 1,
    ) -> DocumentDownloadLink:
        if not 1 <= expires_in_hours <= MAX_DOWNLOAD_HOURS:
            raise ValidationException(
                f"expires_in_hours must be between 1 and {MAX_DOWNLOAD_HOURS}",
                field="expires_in_hours",
            )
        document = await self.get_document(actor, document_id)
        async with self.store.transaction() as repos:
            row = await repos.documents.get_version_by_id(actor.tenant_id, version_id)
        if row is None or row.document_id != document_id:
            raise ResourceNotFoundException("document_version", version_id)
        expiration = timedelta(hours=expires_in_hours)
        url = await self.storage.generate_download_url(
            row.file_key, expiration, filename=sanitize_filename(document.title)
        )
        return DocumentDownloadLink(
            document_id=document_id,
            version=row.version,
            url=url,
            expires_at=self._clock() + expiration,
        )

    async def list_upload_intents(
        self,
        actor: Actor,
        status: str | None = None,
        query: str | None = None,
        take: int = 100,
        cursor: str | None = None,
    ) -> UploadIntentPage:
        """Operator view of the upload ledger, newest first, with counts per status."""
        self.authorization.require_permission(actor, UPLOAD_INTENT_MANAGE)
        if status is not None and status not in UploadIntentStatus.values():
            raise ValidationException(f"Unknown status: {status}", field="status")
        if not 1 <= take <= MAX_PAGE_SIZE:
            raise ValidationException(
                f"take must be between 1 and {MAX_PAGE_SIZE}", field="take"
            )
        query = (query or "").strip() or None
        async with self.store.transaction() as repos:
            items = await repos.intents.list_page(
                actor.tenant_id, status, query, take + 1, cursor
            )
            counts = await repos.intents.count_by_status(actor.tenant_id)
        next_cursor = None
        if len(items) > take:
            items = items[:take]
            next_cursor = items[-1].id
        full_counts = {value: counts.get(value, 0) for value in UploadIntentStatus.values()}
        return UploadIntentPage(items=items, next_cursor=next_cursor, counts=full_counts)
