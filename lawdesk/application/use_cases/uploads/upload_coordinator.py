"""Direct-to-storage uploads: initiate (issue a signed PUT) and finalize (attach the object).

Finalize is idempotent and safe under concurrent calls. Correctness rests on
the metadata store: the (document, version) unique constraint and a
conditional document pointer update decide which attempt wins, and every
loser converges on the winner's row or gets a version conflict.

Every failure path is written to the upload intent in its own short
transaction before the exception leaves this module.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any

from lawdesk.application.dtos.document import DocumentResult
from lawdesk.application.dtos.upload import (
    CommitStatus,
    FinalizedUploadCommit,
    FinalizeUploadCommand,
    FinalizeUploadResult,
    InitiateUploadCommand,
    InitiateUploadResult,
    UploadIntentCreate,
    UploadIntentResult,
)
from lawdesk.application.dtos.user import Actor
from lawdesk.application.interfaces.repositories import IUploadStore
from lawdesk.application.interfaces.storage import IStorageService
from lawdesk.application.services.authorization_service import AuthorizationService
from lawdesk.application.services.storage_probe import head_object_with_retry
from lawdesk.domain.enums import UploadIntentKind, UploadIntentStatus
from lawdesk.domain.exceptions import (
    DocumentVersionConflictException,
    LawDeskException,
    ResourceNotFoundException,
    StorageObjectNotVisibleException,
    StorageUnavailableError,
    UnsupportedContentTypeException,
    UploadIntentClosedException,
    UploadIntentConflictException,
    UploadIntentMismatchException,
    UploadIntentNotFoundException,
    UploadKeyMismatchException,
    UploadSizeMismatchException,
    ValidationException,
)
from lawdesk.domain.permissions import DOCUMENT_UPLOAD
from lawdesk.domain.upload_keys import ObjectKeyBuilder
from lawdesk.domain.upload_policy import (
    UploadContentPolicy,
    infer_content_type,
    normalize_content_type,
)
from lawdesk.shared.telemetry.tracing import add_span_attributes, traced
from lawdesk.shared.utils.datetime import ensure_utc, utc_now
from lawdesk.shared.utils.generators import generate_cuid, is_valid_identifier
from lawdesk.shared.utils.sanitization import sanitize_text

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
CATEGORY_MAX_LENGTH = 64
NOTES_MAX_LENGTH = 20_000


class UploadCoordinator:
    """Orchestrates InitiateUpload and FinalizeUpload.

    Stateless apart from its collaborators; safe to share across requests.
    """

    def __init__(
        self,
        store: IUploadStore,
        storage: IStorageService,
        authorization: AuthorizationService,
        policy: UploadContentPolicy,
        key_builder: ObjectKeyBuilder | None = None,
        upload_ttl: timedelta = timedelta(seconds=600),
        head_max_attempts: int = 3,
        head_backoff_seconds: float = 0.25,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.store = store
        self.storage = storage
        self.authorization = authorization
        self.policy = policy
        self.key_builder = key_builder or ObjectKeyBuilder()
        self.upload_ttl = upload_ttl
        self.head_max_attempts = head_max_attempts
        self.head_backoff_seconds = head_backoff_seconds
        self._clock = clock
        self._sleep = sleep

    # ------------------------------------------------------------------
    # InitiateUpload
    # ------------------------------------------------------------------

    @traced("uploads.initiate")
    async def initiate_upload(
        self, actor: Actor, command: InitiateUploadCommand
    ) -> InitiateUploadResult:
        """Validate, pick the target version, presign a PUT and open an intent."""
        tenant_id = actor.tenant_id
        self.authorization.require_permission(actor, DOCUMENT_UPLOAD)
        if bool(command.document_id) == bool(command.case_id):
            raise ValidationException(
                "Provide exactly one of document_id or case_id", field="document_id"
            )
        if command.intent_id is not None and not is_valid_identifier(command.intent_id):
            raise ValidationException("Invalid intent_id", field="intent_id")
        self.policy.validate_size(command.file_size)
        content_type = self.policy.resolve_content_type(
            command.content_type, command.filename
        )

        async with self.store.transaction() as repos:
            document = None
            if command.document_id:
                document = await repos.documents.get_by_id(tenant_id, command.document_id)
                if document is None:
                    raise ResourceNotFoundException("document", command.document_id)
            existing = None
            if command.intent_id:
                existing = await repos.intents.get_by_id(tenant_id, command.intent_id)

        case_id = document.case_id if document else str(command.case_id)
        await self.authorization.require_case_access(actor, case_id)

        if existing is not None:
            return await self._resume_intent(existing, command, case_id, content_type)

        if document is not None:
            document_id = document.id
            version = document.next_version
        else:
            document_id = generate_cuid()
            version = 1
        intent_id = command.intent_id or generate_cuid()
        key = self.key_builder.build_key(
            tenant_id, case_id, document_id, version, intent_id, command.filename
        )
        now = self._clock()
        presigned = await self.storage.presign_put_object(
            key, content_type, self.upload_ttl
        )
        expires_at = now + self.upload_ttl

        descriptive = {
            "title": sanitize_text(command.title, TITLE_MAX_LENGTH),
            "category": sanitize_text(command.category, CATEGORY_MAX_LENGTH),
            "notes": sanitize_text(command.notes, NOTES_MAX_LENGTH),
        }
        async with self.store.transaction() as repos:
            intent = await repos.intents.create(
                UploadIntentCreate(
                    id=intent_id,
                    tenant_id=tenant_id,
                    kind=UploadIntentKind.DOCUMENT.value,
                    case_id=case_id,
                    document_id=document_id,
                    key=key,
                    filename=command.filename,
                    content_type=content_type,
                    expected_file_size=command.file_size,
                    expected_version=version,
                    expires_at=expires_at,
                    created_by=actor.user_id,
                    result=descriptive,
                )
            )
        add_span_attributes(tenant_id=tenant_id, intent_id=intent.id, document_id=document_id)
        logger.info(
            "Upload intent opened: tenant=%s intent=%s document=%s version=%s",
            tenant_id,
            intent.id,
            document_id,
            version,
        )
        return InitiateUploadResult(
            intent_id=intent.id,
            upload_url=presigned.url,
            upload_method=presigned.method,
            upload_headers=presigned.headers,
            key=key,
            case_id=case_id,
            document_id=document_id,
            expected_version=version,
            expected_file_size=command.file_size,
            expected_content_type=content_type,
            expires_at=expires_at,
        )

    async def _resume_intent(
        self,
        intent: UploadIntentResult,
        command: InitiateUploadCommand,
        case_id: str,
        content_type: str,
    ) -> InitiateUploadResult:
        """Re-sign the URL for a client retry of the same initiate call."""
        if intent.status != UploadIntentStatus.INITIATED.value:
            raise UploadIntentConflictException(intent.id, f"intent is {intent.status}")
        now = self._clock()
        expires_at = ensure_utc(intent.expires_at)
        if expires_at is None or expires_at <= now:
            raise UploadIntentConflictException(intent.id, "intent expired")
        same_target = (
            intent.case_id == case_id
            and (command.document_id is None or intent.document_id == command.document_id)
            and intent.filename == command.filename
            and intent.expected_file_size == command.file_size
            and intent.content_type == content_type
        )
        if not same_target:
            raise UploadIntentConflictException(intent.id, "intent was opened for a different upload")
        presigned = await self.storage.presign_put_object(
            intent.key, intent.content_type, expires_at - now
        )
        logger.info("Upload intent re-signed: tenant=%s intent=%s", intent.tenant_id, intent.id)
        return InitiateUploadResult(
            intent_id=intent.id,
            upload_url=presigned.url,
            upload_method=presigned.method,
            upload_headers=presigned.headers,
            key=intent.key,
            case_id=intent.case_id,
            document_id=intent.document_id,
            expected_version=intent.expected_version,
            expected_file_size=intent.expected_file_size,
            expected_content_type=intent.content_type,
            expires_at=expires_at,
        )

    # ------------------------------------------------------------------
    # FinalizeUpload
    # ------------------------------------------------------------------

    @traced("uploads.finalize")
    async def finalize_upload(
        self, actor: Actor, command: FinalizeUploadCommand
    ) -> FinalizeUploadResult:
        """Verify the uploaded object and commit it as the next document version."""
        self.authorization.require_permission(actor, DOCUMENT_UPLOAD)
        intent: UploadIntentResult | None = None
        try:
            intent = await self._resolve_intent(actor.tenant_id, command)
            add_span_attributes(
                tenant_id=actor.tenant_id,
                intent_id=intent.id if intent else None,
                document_id=command.document_id,
            )
            return await self._finalize(actor, command, intent)
        except LawDeskException:
            raise
        except Exception as exc:
            await self._record_unexpected(intent, exc)
            raise

    async def _resolve_intent(
        self, tenant_id: str, command: FinalizeUploadCommand
    ) -> UploadIntentResult | None:
        key = command.key.strip()
        async with self.store.transaction() as repos:
            if command.intent_id:
                intent = await repos.intents.get_by_id(tenant_id, command.intent_id)
                if intent is None:
                    raise UploadIntentNotFoundException(command.intent_id)
            else:
                intent = await repos.intents.get_by_key(tenant_id, key)
        if intent is None:
            return None

        mismatch = None
        if intent.key != key:
            mismatch = "key"
        elif intent.document_id != command.document_id:
            mismatch = "document_id"
        elif intent.expected_version != command.expected_version:
            mismatch = "expected_version"
        elif command.case_id and intent.case_id != command.case_id:
            mismatch = "case_id"
        if mismatch:
            await self._fail_intent(
                intent, "UPLOAD_INTENT_MISMATCH", f"Upload does not match its intent ({mismatch})"
            )
            raise UploadIntentMismatchException(intent.id, mismatch)
        if intent.status in (UploadIntentStatus.FAILED.value, UploadIntentStatus.EXPIRED.value):
            raise UploadIntentClosedException(intent.id, intent.status)
        return intent

    async def _finalize(
        self,
        actor: Actor,
        command: FinalizeUploadCommand,
        intent: UploadIntentResult | None,
    ) -> FinalizeUploadResult:
        tenant_id = actor.tenant_id
        key = command.key.strip()
        document_id = command.document_id
        version = command.expected_version
        intent_id = intent.id if intent else None

        async with self.store.transaction() as repos:
            document = await repos.documents.get_by_id(tenant_id, document_id)
        if document is not None:
            case_id = document.case_id
        else:
            case_id = intent.case_id if intent else (command.case_id or "")
            if not case_id:
                raise ValidationException("case_id is required for a new document", field="case_id")
        await self.authorization.require_case_access(actor, case_id, fresh=True)

        if intent is not None and intent.status == UploadIntentStatus.FINALIZED.value:
            logger.info("Finalize replay: tenant=%s intent=%s", tenant_id, intent.id)
            return FinalizeUploadResult(
                document_id=intent.document_id,
                version=intent.expected_version,
                document_version_id=intent.document_version_id,
                idempotent=True,
                intent_id=intent.id,
            )
        converged = await self._converge_on_existing(tenant_id, intent, document_id, version, key)
        if converged is not None:
            return converged

        # Storage verification
        try:
            stored = await head_object_with_retry(
                self.storage,
                key,
                max_attempts=self.head_max_attempts,
                backoff_seconds=self.head_backoff_seconds,
                sleep=self._sleep,
            )
        except StorageUnavailableError as exc:
            await self._record_error(intent, f"STORAGE_UNAVAILABLE: {exc.details.get('reason')}")
            raise
        if stored is None:
            await self._record_error(intent, "STORAGE_OBJECT_NOT_VISIBLE: uploaded object not found")
            logger.warning(
                "Uploaded object not visible: tenant=%s intent=%s key=%s", tenant_id, intent_id, key
            )
            raise StorageObjectNotVisibleException(key, self.head_max_attempts, intent_id)

        size = stored.content_length
        try:
            self.policy.validate_size(size, intent_id)
        except ValidationException as exc:
            await self._fail_intent(intent, "FILE_SIZE_INVALID", exc.message)
            raise
        expected_size = intent.expected_file_size if intent else command.expected_file_size
        if expected_size and size != expected_size:
            await self._fail_intent(
                intent, "UPLOAD_SIZE_MISMATCH", f"expected {expected_size} bytes, stored {size}"
            )
            raise UploadSizeMismatchException(expected_size, size, intent_id)
        declared_type = (
            intent.content_type
            if intent
            else normalize_content_type(command.expected_content_type)
        )
        content_type = (
            normalize_content_type(stored.content_type)
            or declared_type
            or infer_content_type(command.filename)
        )
        if not self.policy.is_allowed(content_type):
            await self._fail_intent(
                intent, "UNSUPPORTED_CONTENT_TYPE", f"stored type {content_type or 'unknown'}"
            )
            raise UnsupportedContentTypeException(content_type, intent_id)

        # Target checks
        if document is not None:
            if intent is not None and intent.case_id != document.case_id:
                await self._fail_intent(intent, "UPLOAD_INTENT_MISMATCH", "case does not own document")
                raise UploadIntentMismatchException(intent.id, "case_id")
            if intent is None and command.case_id and command.case_id != document.case_id:
                raise UploadIntentMismatchException(None, "case_id")
        elif version != 1:
            await self._fail_intent(intent, "DOCUMENT_NOT_FOUND", "new documents start at version 1")
            raise ValidationException(
                "A new document must be uploaded as version 1",
                field="expected_version",
                intent_id=intent_id,
            )

        if not self.key_builder.key_matches(key, tenant_id, case_id, document_id, version):
            await self._fail_intent(intent, "UPLOAD_KEY_MISMATCH", "key outside document version prefix")
            raise UploadKeyMismatchException(
                key, self._expected_prefix(tenant_id, case_id, document_id, version), intent_id
            )

        # Version race check
        if document is not None:
            if document.version == version and document.file_key == key:
                return await self._converged(tenant_id, intent, document_id, version, key)
            if document.next_version != version:
                converged = await self._converge_on_existing(
                    tenant_id, intent, document_id, version, key
                )
                if converged is not None:
                    return converged
                await self._fail_intent(
                    intent,
                    "DOCUMENT_VERSION_CONFLICT",
                    f"expected version {version}, document is at {document.version}",
                )
                raise DocumentVersionConflictException(
                    document_id, version, document.version, intent_id
                )

        # Atomic commit
        finalized_at = self._clock()
        title, category, notes = self._descriptive_fields(command, intent, document)
        result: dict[str, Any] = {
            **((intent.result or {}) if intent else {}),
            "title": title,
            "category": category,
            "notes": notes,
            "case_id": case_id,
            "document_id": document_id,
            "version": version,
            "key": key,
            "file_size": size,
            "content_type": content_type,
            "finalized_at": finalized_at.isoformat(),
        }
        result.pop("error", None)
        outcome = await self.store.commit_finalized_upload(
            FinalizedUploadCommit(
                tenant_id=tenant_id,
                document_id=document_id,
                case_id=case_id,
                is_new_document=document is None,
                version=version,
                key=key,
                content_type=content_type,
                file_size=size,
                uploader_id=actor.user_id,
                title=title,
                category=category,
                notes=notes,
                intent_id=intent_id,
                result=result,
                finalized_at=finalized_at,
                previous_version=document.version if document else None,
                previous_file_key=document.file_key if document else None,
            )
        )
        if outcome.committed:
            logger.info(
                "Upload finalized: tenant=%s intent=%s document=%s version=%s",
                tenant_id,
                intent_id,
                document_id,
                version,
            )
            return FinalizeUploadResult(
                document_id=document_id,
                version=version,
                document_version_id=outcome.document_version_id,
                idempotent=False,
                intent_id=intent_id,
            )

        if outcome.status is CommitStatus.INTENT_CLOSED and intent is not None:
            async with self.store.transaction() as repos:
                current = await repos.intents.get_by_id(tenant_id, intent.id)
            status = current.status if current else UploadIntentStatus.EXPIRED.value
            logger.warning(
                "Finalize rolled back, intent is %s: tenant=%s intent=%s",
                status,
                tenant_id,
                intent.id,
            )
            if current is not None and status == UploadIntentStatus.FINALIZED.value:
                return FinalizeUploadResult(
                    document_id=current.document_id,
                    version=current.expected_version,
                    document_version_id=current.document_version_id,
                    idempotent=True,
                    intent_id=current.id,
                )
            raise UploadIntentClosedException(intent.id, status)

        # Lost a race: converge on the winner or report the conflict.
        logger.info(
            "Finalize commit lost race (%s): tenant=%s document=%s version=%s",
            outcome.status.value,
            tenant_id,
            document_id,
            version,
        )
        converged = await self._converge_on_existing(tenant_id, intent, document_id, version, key)
        if converged is not None:
            return converged
        await self._fail_intent(
            intent, "DOCUMENT_VERSION_CONFLICT", f"version {version} was taken by another upload"
        )
        raise DocumentVersionConflictException(document_id, version, None, intent_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _converge_on_existing(
        self,
        tenant_id: str,
        intent: UploadIntentResult | None,
        document_id: str,
        version: int,
        key: str,
    ) -> FinalizeUploadResult | None:
        """Return success if (document, version) is already committed with this key."""
        async with self.store.transaction() as repos:
            row = await repos.documents.get_version(tenant_id, document_id, version)
        if row is None or row.file_key != key:
            return None
        return await self._converged(tenant_id, intent, document_id, version, key, row.id)

    async def _converged(
        self,
        tenant_id: str,
        intent: UploadIntentResult | None,
        document_id: str,
        version: int,
        key: str,
        version_id: str | None = None,
    ) -> FinalizeUploadResult:
        if version_id is None:
            async with self.store.transaction() as repos:
                row = await repos.documents.get_version(tenant_id, document_id, version)
            version_id = row.id if row else None
        if intent is not None and intent.status == UploadIntentStatus.INITIATED.value:
            finalized_at = self._clock()
            result = {
                **(intent.result or {}),
                "document_id": document_id,
                "version": version,
                "key": key,
                "finalized_at": finalized_at.isoformat(),
            }
            result.pop("error", None)
            async with self.store.transaction() as repos:
                await repos.intents.mark_finalized(
                    tenant_id, intent.id, version_id, result, finalized_at
                )
        logger.info(
            "Finalize converged on existing version: tenant=%s document=%s version=%s",
            tenant_id,
            document_id,
            version,
        )
        return FinalizeUploadResult(
            document_id=document_id,
            version=version,
            document_version_id=version_id,
            idempotent=True,
            intent_id=intent.id if intent else None,
        )

    def _descriptive_fields(
        self,
        command: FinalizeUploadCommand,
        intent: UploadIntentResult | None,
        document: DocumentResult | None,
    ) -> tuple[str, str | None, str | None]:
        """Finalize input wins, then what was captured at initiate, then the current document."""
        captured = intent.descriptive_fields() if intent else {}
        title = (
            sanitize_text(command.title, TITLE_MAX_LENGTH)
            or captured.get("title")
            or (document.title if document else None)
            or command.filename[:TITLE_MAX_LENGTH]
        )
        category = (
            sanitize_text(command.category, CATEGORY_MAX_LENGTH)
            or captured.get("category")
            or (document.category if document else None)
        )
        notes = (
            sanitize_text(command.notes, NOTES_MAX_LENGTH)
            or captured.get("notes")
            or (document.notes if document else None)
        )
        return title, category, notes

    def _expected_prefix(
        self, tenant_id: str, case_id: str, document_id: str, version: int
    ) -> str:
        try:
            return self.key_builder.key_prefix(tenant_id, case_id, document_id, version)
        except ValueError:
            return ""

    async def _fail_intent(
        self, intent: UploadIntentResult | None, code: str, message: str
    ) -> None:
        """INITIATED -> FAILED with the error in last_error and result."""
        if intent is None:
            return
        result = {**(intent.result or {}), "error": {"code": code, "message": message}}
        async with self.store.transaction() as repos:
            changed = await repos.intents.mark_failed(
                intent.tenant_id, intent.id, f"{code}: {message}", result
            )
        if changed:
            logger.warning(
                "Upload intent failed: tenant=%s intent=%s code=%s",
                intent.tenant_id,
                intent.id,
                code,
            )

    async def _record_error(self, intent: UploadIntentResult | None, message: str) -> None:
        """Record a resumable error; the intent stays INITIATED."""
        if intent is None:
            return
        async with self.store.transaction() as repos:
            await repos.intents.record_error(intent.tenant_id, intent.id, message)

    async def _record_unexpected(
        self, intent: UploadIntentResult | None, exc: Exception
    ) -> None:
        logger.exception(
            "Unexpected finalize error: intent=%s", intent.id if intent else None
        )
        if intent is None:
            return
        try:
            await self._record_error(intent, f"INTERNAL_ERROR: {type(exc).__name__}")
        except Exception:
            logger.exception("Could not record finalize error on intent %s", intent.id)
