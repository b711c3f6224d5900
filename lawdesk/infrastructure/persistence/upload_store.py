"""SQL unit of work for the upload protocol.

transaction() yields repositories bound to one session inside session.begin();
commit_finalized_upload() writes the version row, the document pointer and the
intent status in a single transaction and reports races as a tagged outcome.
The commit rolls back when its intent is no longer INITIATED.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lawdesk.application.dtos.upload import (
    CommitOutcome,
    CommitStatus,
    FinalizedUploadCommit,
)
from lawdesk.infrastructure.persistence.database import set_tenant_context
from lawdesk.infrastructure.persistence.repositories.base import is_unique_violation
from lawdesk.infrastructure.persistence.repositories.document_repo import (
    DocumentRepository,
)
from lawdesk.infrastructure.persistence.repositories.upload_intent_repo import (
    UploadIntentRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadRepositories:
    """Repositories sharing one session (and therefore one transaction)."""

    documents: DocumentRepository
    intents: UploadIntentRepository

    @classmethod
    def for_session(cls, session: AsyncSession) -> "UploadRepositories":
        return cls(
            documents=DocumentRepository(session),
            intents=UploadIntentRepository(session),
        )


class _StalePointer(Exception):
    """Raised inside the commit transaction to roll it back when the pointer moved."""


class _IntentClosed(Exception):
    """Raised inside the commit transaction when the intent already left INITIATED."""


class SqlUploadStore:
    """IUploadStore over SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[UploadRepositories]:
        async with self._session_factory() as session:
            async with session.begin():
                await set_tenant_context(session)
                yield UploadRepositories.for_session(session)

    async def commit_finalized_upload(self, commit: FinalizedUploadCommit) -> CommitOutcome:
        version_id: str | None = None
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await set_tenant_context(session, commit.tenant_id)
                    version_id = await self._write(session, commit)
        except _StalePointer:
            logger.info(
                "Document pointer moved before commit: tenant=%s document=%s version=%s",
                commit.tenant_id,
                commit.document_id,
                commit.version,
            )
            return CommitOutcome(CommitStatus.STALE_POINTER)
        except _IntentClosed:
            logger.warning(
                "Intent left INITIATED before commit; rolled back: tenant=%s intent=%s",
                commit.tenant_id,
                commit.intent_id,
            )
            return CommitOutcome(CommitStatus.INTENT_CLOSED)
        except IntegrityError as exc:
            if not is_unique_violation(exc):
                raise
            logger.info(
                "Unique conflict on commit: tenant=%s document=%s version=%s",
                commit.tenant_id,
                commit.document_id,
                commit.version,
            )
            return CommitOutcome(CommitStatus.UNIQUE_CONFLICT)
        return CommitOutcome(CommitStatus.COMMITTED, document_version_id=version_id)

    async def _write(self, session: AsyncSession, commit: FinalizedUploadCommit) -> str:
        documents = DocumentRepository(session)
        intents = UploadIntentRepository(session)

        if commit.is_new_document:
            await documents.insert_document(
                tenant_id=commit.tenant_id,
                document_id=commit.document_id,
                case_id=commit.case_id,
                title=commit.title,
                category=commit.category,
                notes=commit.notes,
                file_key=commit.key,
                content_type=commit.content_type,
                file_size=commit.file_size,
                version=commit.version,
                uploader_id=commit.uploader_id,
            )
        else:
            moved = await documents.advance_pointer(
                tenant_id=commit.tenant_id,
                document_id=commit.document_id,
                previous_version=commit.previous_version,
                previous_file_key=commit.previous_file_key,
                version=commit.version,
                file_key=commit.key,
                content_type=commit.content_type,
                file_size=commit.file_size,
                uploader_id=commit.uploader_id,
                title=commit.title,
                category=commit.category,
                notes=commit.notes,
                updated_at=commit.finalized_at,
            )
            if not moved:
                raise _StalePointer()

        version = await documents.insert_version(
            tenant_id=commit.tenant_id,
            document_id=commit.document_id,
            version=commit.version,
            file_key=commit.key,
            content_type=commit.content_type,
            file_size=commit.file_size,
            uploader_id=commit.uploader_id,
        )
        if commit.intent_id is not None:
            marked = await intents.mark_finalized(
                commit.tenant_id,
                commit.intent_id,
                version.id,
                {**commit.result, "document_version_id": version.id},
                commit.finalized_at,
            )
            if not marked:
                raise _IntentClosed()
        return version.id
