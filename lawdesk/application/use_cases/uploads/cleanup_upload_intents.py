"""Cleanup sweep for stale upload intents.

Picks INITIATED/FAILED intents whose signed URL expired more than
grace_minutes ago and were not cleaned yet, then per intent:

1. key outside its version prefix: fail it, never touch the object;
2. key already committed (version row or document pointer): recover as FINALIZED;
3. object missing: expire it;
4. object present: claim the intent, then delete the orphan (or only report
   it on dry runs).

Objects referenced by a document version are never deleted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from lawdesk.application.dtos.upload import CleanupReport, UploadIntentResult
from lawdesk.application.dtos.user import Actor
from lawdesk.application.interfaces.repositories import IUploadStore
from lawdesk.application.interfaces.storage import IStorageService
from lawdesk.application.services.authorization_service import AuthorizationService
from lawdesk.domain.enums import UploadIntentStatus
from lawdesk.domain.exceptions import ValidationException
from lawdesk.domain.permissions import UPLOAD_INTENT_MANAGE
from lawdesk.domain.upload_keys import ObjectKeyBuilder
from lawdesk.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

MAX_TAKE = 500
MAX_GRACE_MINUTES = 30 * 24 * 60


class CleanupUploadIntentsUseCase:
    """Reclaims storage for abandoned uploads and reconciles the intent ledger."""

    def __init__(
        self,
        store: IUploadStore,
        storage: IStorageService,
        key_builder: ObjectKeyBuilder | None = None,
        authorization: AuthorizationService | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.storage = storage
        self.key_builder = key_builder or ObjectKeyBuilder()
        self.authorization = authorization
        self._clock = clock

    async def run_for_actor(
        self,
        actor: Actor,
        take: int = 100,
        grace_minutes: int = 1440,
        dry_run: bool = False,
    ) -> CleanupReport:
        """Operator entry point: requires upload_intent:manage."""
        if self.authorization is not None:
            self.authorization.require_permission(actor, UPLOAD_INTENT_MANAGE)
        return await self.run(actor.tenant_id, take, grace_minutes, dry_run)

    async def run(
        self,
        tenant_id: str,
        take: int = 100,
        grace_minutes: int = 1440,
        dry_run: bool = False,
    ) -> CleanupReport:
        if not 1 <= take <= MAX_TAKE:
            raise ValidationException(f"take must be between 1 and {MAX_TAKE}", field="take")
        if not 0 <= grace_minutes <= MAX_GRACE_MINUTES:
            raise ValidationException("grace_minutes out of range", field="grace_minutes")
        cutoff = self._clock() - timedelta(minutes=grace_minutes)
        report = CleanupReport(take=take, cutoff=cutoff, dry_run=dry_run)

        async with self.store.transaction() as repos:
            intents = await repos.intents.list_stale(tenant_id, cutoff, take)
        for intent in intents:
            await self._process(intent, report)
            report.intent_ids.append(intent.id)

        logger.info(
            "Upload intent cleanup done: tenant=%s take=%s cutoff=%s dry_run=%s "
            "recovered=%s cleaned=%s expired=%s failed=%s deleted_bytes=%s",
            tenant_id,
            take,
            cutoff.isoformat(),
            dry_run,
            report.recovered,
            report.cleaned,
            report.expired,
            report.failed,
            report.deleted_bytes,
        )
        return report

    async def _process(self, intent: UploadIntentResult, report: CleanupReport) -> None:
        now = self._clock()
        checked: dict[str, Any] = {**(intent.result or {}), "checked_at": now.isoformat()}
        tenant_id = intent.tenant_id
        initiated = intent.status == UploadIntentStatus.INITIATED.value

        if not self.key_builder.key_matches(
            intent.key, tenant_id, intent.case_id, intent.document_id, intent.expected_version
        ):
            report.failed += 1
            result = {**checked, "error": {"code": "KEY_PREFIX_MISMATCH", "key": intent.key}}
            async with self.store.transaction() as repos:
                if initiated:
                    await repos.intents.mark_failed(
                        tenant_id, intent.id, "KEY_PREFIX_MISMATCH: cleanup refused", result
                    )
                await repos.intents.mark_cleaned(tenant_id, intent.id, now, result)
            logger.warning("Cleanup refused key outside prefix: intent=%s", intent.id)
            return

        async with self.store.transaction() as repos:
            row = await repos.documents.get_version(
                tenant_id, intent.document_id, intent.expected_version
            )
            document = await repos.documents.get_by_id(tenant_id, intent.document_id)
        referenced = (row is not None and row.file_key == intent.key) or (
            document is not None
            and document.file_key == intent.key
            and document.version == intent.expected_version
        )
        if referenced:
            version_id = row.id if row is not None and row.file_key == intent.key else None
            async with self.store.transaction() as repos:
                if initiated:
                    report.recovered += 1
                    await repos.intents.mark_finalized(
                        tenant_id,
                        intent.id,
                        version_id,
                        {**checked, "recovered": True, "document_version_id": version_id},
                        now,
                    )
                else:
                    await repos.intents.mark_cleaned(
                        tenant_id, intent.id, now, {**checked, "referenced": True}
                    )
            return

        head = await self.storage.head_object(intent.key)
        if head is None:
            report.expired += 1
            result = {**checked, "expired": True, "object_missing": True}
            async with self.store.transaction() as repos:
                if initiated:
                    await repos.intents.mark_expired(tenant_id, intent.id, now, result)
                else:
                    await repos.intents.mark_cleaned(tenant_id, intent.id, now, result)
            return

        if report.dry_run:
            async with self.store.transaction() as repos:
                await repos.intents.update_result(
                    tenant_id,
                    intent.id,
                    {
                        **checked,
                        "dry_run": True,
                        "would_delete": True,
                        "content_length": head.content_length,
                    },
                )
            return

        # An INITIATED intent is claimed before the delete so a finalize that
        # commits in between keeps its object.
        if initiated:
            async with self.store.transaction() as repos:
                claimed = await repos.intents.mark_expired(
                    tenant_id, intent.id, now, {**checked, "expired": True, "deleting": True}
                )
            if not claimed:
                logger.info(
                    "Cleanup skipped intent that left INITIATED: tenant=%s intent=%s",
                    tenant_id,
                    intent.id,
                )
                return

        await self.storage.delete_object(intent.key)
        report.cleaned += 1
        report.deleted_bytes += head.content_length
        result = {**checked, "deleted": True, "deleted_bytes": head.content_length}
        async with self.store.transaction() as repos:
            if initiated:
                await repos.intents.update_result(
                    tenant_id, intent.id, {**result, "expired": True}
                )
            else:
                await repos.intents.mark_cleaned(tenant_id, intent.id, now, result)
        logger.info(
            "Deleted orphaned upload: tenant=%s intent=%s bytes=%s",
            tenant_id,
            intent.id,
            head.content_length,
        )
