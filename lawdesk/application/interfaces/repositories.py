"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from lawdesk.application.dtos.document import (
        DocumentResult,
        DocumentVersionResult,
    )
    from lawdesk.application.dtos.upload import (
        CommitOutcome,
        FinalizedUploadCommit,
        UploadIntentCreate,
        UploadIntentResult,
    )
    from lawdesk.application.dtos.user import UserResult


class IUserRepository(Protocol):
    async def get_by_id(self, user_id: str) -> UserResult | None:
        """Return user by id (any tenant); caller checks tenant."""


class IDocumentRepository(Protocol):
    async def get_by_id(self, tenant_id: str, document_id: str) -> DocumentResult | None:
        """Return the document if it exists in the tenant and is not deleted."""

    async def get_version(
        self, tenant_id: str, document_id: str, version: int
    ) -> DocumentVersionResult | None:
        """Return the (document, version) history row."""

    async def get_version_by_id(
        self, tenant_id: str, version_id: str
    ) -> DocumentVersionResult | None:
        """Return a history row by its id."""

    async def list_versions(
        self, tenant_id: str, document_id: str
    ) -> list[DocumentVersionResult]:
        """Return all history rows, ascending by version."""


class IUploadIntentRepository(Protocol):
    """Upload intent ledger. Status changes only leave INITIATED."""

    async def create(self, data: UploadIntentCreate) -> UploadIntentResult:
        """Insert an intent in status INITIATED."""

    async def get_by_id(self, tenant_id: str, intent_id: str) -> UploadIntentResult | None:
        """Return intent by id in the tenant."""

    async def get_by_key(self, tenant_id: str, key: str) -> UploadIntentResult | None:
        """Return intent by object key in the tenant."""

    async def mark_finalized(
        self,
        tenant_id: str,
        intent_id: str,
        document_version_id: str | None,
        result: dict[str, Any],
        finalized_at: datetime,
    ) -> bool:
        """INITIATED -> FINALIZED. Returns False if the intent was not INITIATED."""

    async def mark_failed(
        self,
        tenant_id: str,
        intent_id: str,
        error: str,
        result: dict[str, Any] | None = None,
    ) -> bool:
        """INITIATED -> FAILED with last_error. Returns False if not INITIATED."""

    async def mark_expired(
        self,
        tenant_id: str,
        intent_id: str,
        cleaned_at: datetime,
        result: dict[str, Any] | None = None,
    ) -> bool:
        """INITIATED -> EXPIRED and stamp cleaned_at. Returns False if not INITIATED."""

    async def record_error(self, tenant_id: str, intent_id: str, error: str) -> bool:
        """Set last_error on an INITIATED intent without changing status."""

    async def mark_cleaned(
        self,
        tenant_id: str,
        intent_id: str,
        cleaned_at: datetime,
        result: dict[str, Any] | None = None,
    ) -> bool:
        """Stamp cleaned_at (and optionally result) without changing status."""

    async def update_result(
        self, tenant_id: str, intent_id: str, result: dict[str, Any]
    ) -> bool:
        """Replace the result snapshot without changing status."""

    async def list_stale(
        self, tenant_id: str, cutoff: datetime, take: int
    ) -> list[UploadIntentResult]:
        """INITIATED/FAILED intents with cleaned_at NULL and expires_at < cutoff, oldest first."""

    async def list_page(
        self,
        tenant_id: str,
        status: str | None,
        query: str | None,
        take: int,
        cursor: str | None,
    ) -> list[UploadIntentResult]:
        """Newest first; cursor is the id of the last row of the previous page."""

    async def count_by_status(self, tenant_id: str) -> dict[str, int]:
        """Return {status: count} for the tenant."""


class IUploadRepositories(Protocol):
    """Repositories bound to one transaction."""

    documents: IDocumentRepository
    intents: IUploadIntentRepository


class IUploadStore(Protocol):
    """Unit of work over the metadata store.

    Each transaction() block commits on success and rolls back on exception.
    """

    def transaction(self) -> AbstractAsyncContextManager[IUploadRepositories]:
        """Open a short transaction and yield repositories bound to it."""
        ...

    async def commit_finalized_upload(self, commit: FinalizedUploadCommit) -> CommitOutcome:
        """Write version row, document pointer and intent status atomically.

        Unique-constraint and stale-pointer races come back as tagged outcomes;
        any other database error propagates.
        """
        ...
