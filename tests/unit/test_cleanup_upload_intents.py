"""Cleanup sweep: every branch of the per-intent decision and the report."""

from dataclasses import replace
from datetime import timedelta

import pytest

from fakes import CASE_ID, TENANT_ID, FakeClock, FakeObjectStorage, FakeUploadStore
from lawdesk.application.dtos.user import Actor
from lawdesk.application.use_cases.uploads import CleanupUploadIntentsUseCase
from lawdesk.domain.enums import UploadIntentStatus
from lawdesk.domain.exceptions import AuthorizationException, ValidationException

INITIATED = UploadIntentStatus.INITIATED.value
FINALIZED = UploadIntentStatus.FINALIZED.value
FAILED = UploadIntentStatus.FAILED.value
EXPIRED = UploadIntentStatus.EXPIRED.value


class TestSelection:
    async def test_only_stale_uncleaned_open_intents(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore, clock: FakeClock
    ) -> None:
        stale = store.add_intent()
        store.add_intent(expires_at=clock.now - timedelta(hours=1))  # inside grace
        store.add_intent(status=FINALIZED)
        store.add_intent(status=EXPIRED)
        report = await cleanup.run(TENANT_ID)
        assert report.intent_ids == [stale.id]
        assert report.cutoff == clock.now - timedelta(minutes=1440)

    async def test_take_picks_oldest_first(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore, clock: FakeClock
    ) -> None:
        newer = store.add_intent(expires_at=clock.now - timedelta(days=2))
        older = store.add_intent(expires_at=clock.now - timedelta(days=5))
        report = await cleanup.run(TENANT_ID, take=1)
        assert report.intent_ids == [older.id]
        assert store.db.intents[newer.id].cleaned_at is None

    async def test_cleaned_intents_are_not_picked_again(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore
    ) -> None:
        store.add_intent(status=FAILED)
        first = await cleanup.run(TENANT_ID)
        second = await cleanup.run(TENANT_ID)
        assert len(first.intent_ids) == 1
        assert second.intent_ids == []

    @pytest.mark.parametrize(
        "kwargs", [{"take": 0}, {"take": 501}, {"grace_minutes": -1}, {"grace_minutes": 43201}]
    )
    async def test_bounds(self, cleanup: CleanupUploadIntentsUseCase, kwargs: dict) -> None:
        with pytest.raises(ValidationException):
            await cleanup.run(TENANT_ID, **kwargs)


class TestDecisions:
    async def test_key_outside_prefix_fails_and_keeps_object(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore, storage: FakeObjectStorage
    ) -> None:
        key = f"tenants/{TENANT_ID}/cases/{CASE_ID}/documents/other/v1/x-brief.pdf"
        intent = store.add_intent(key=key)
        storage.put(key, 100)
        report = await cleanup.run(TENANT_ID)
        assert report.failed == 1
        row = store.db.intents[intent.id]
        assert row.status == FAILED
        assert row.last_error.startswith("KEY_PREFIX_MISMATCH")
        assert row.cleaned_at is not None
        assert storage.deleted == []

    async def test_failed_intent_outside_prefix_only_marked_cleaned(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore
    ) -> None:
        intent = store.add_intent(key="elsewhere/brief.pdf", status=FAILED)
        await cleanup.run(TENANT_ID)
        row = store.db.intents[intent.id]
        assert row.status == FAILED
        assert row.cleaned_at is not None

    async def test_committed_key_is_recovered_not_deleted(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore, storage: FakeObjectStorage
    ) -> None:
        intent = store.add_intent()
        version = store.add_committed_version(TENANT_ID, CASE_ID, "doc1", 1, intent.key)
        storage.put(intent.key, 2048)
        report = await cleanup.run(TENANT_ID)
        assert report.recovered == 1
        row = store.db.intents[intent.id]
        assert row.status == FINALIZED
        assert row.document_version_id == version.id
        assert row.result["recovered"] is True
        assert storage.deleted == []

    async def test_pointer_only_reference_is_recovered(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore
    ) -> None:
        intent = store.add_intent()
        store.add_committed_version(TENANT_ID, CASE_ID, "doc1", 1, intent.key)
        store.db.versions.clear()
        report = await cleanup.run(TENANT_ID)
        assert report.recovered == 1
        assert store.db.intents[intent.id].document_version_id is None

    async def test_referenced_failed_intent_only_marked_cleaned(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore, storage: FakeObjectStorage
    ) -> None:
        intent = store.add_intent(status=FAILED)
        store.add_committed_version(TENANT_ID, CASE_ID, "doc1", 1, intent.key)
        storage.put(intent.key, 2048)
        report = await cleanup.run(TENANT_ID)
        assert report.recovered == 0
        row = store.db.intents[intent.id]
        assert row.status == FAILED
        assert row.cleaned_at is not None
        assert storage.deleted == []

    async def test_missing_object_expires_intent(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore
    ) -> None:
        intent = store.add_intent()
        report = await cleanup.run(TENANT_ID)
        assert report.expired == 1
        row = store.db.intents[intent.id]
        assert row.status == EXPIRED
        assert row.cleaned_at is not None
        assert row.result["object_missing"] is True

    async def test_dry_run_only_reports(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore, storage: FakeObjectStorage
    ) -> None:
        intent = store.add_intent()
        storage.put(intent.key, 700)
        report = await cleanup.run(TENANT_ID, dry_run=True)
        assert report.dry_run is True
        assert report.cleaned == 0
        assert report.deleted_bytes == 0
        row = store.db.intents[intent.id]
        assert row.status == INITIATED
        assert row.cleaned_at is None
        assert row.result["would_delete"] is True
        assert row.result["content_length"] == 700
        assert intent.key in storage.objects

    async def test_orphan_is_deleted_and_intent_expired(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore, storage: FakeObjectStorage
    ) -> None:
        intent = store.add_intent()
        storage.put(intent.key, 700)
        report = await cleanup.run(TENANT_ID)
        assert report.cleaned == 1
        assert report.deleted_bytes == 700
        assert storage.deleted == [intent.key]
        row = store.db.intents[intent.id]
        assert row.status == EXPIRED
        assert row.result["deleted"] is True
        assert row.result["deleting"] is True
        assert row.cleaned_at is not None

    async def test_finalize_after_head_keeps_object(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore, storage: FakeObjectStorage
    ) -> None:
        intent = store.add_intent()
        storage.put(intent.key, 700)
        head_object = storage.head_object

        async def head_then_finalize(key: str):
            found = await head_object(key)
            store.db.intents[intent.id] = replace(store.db.intents[intent.id], status=FINALIZED)
            return found

        storage.head_object = head_then_finalize
        report = await cleanup.run(TENANT_ID)
        assert report.cleaned == 0
        assert report.deleted_bytes == 0
        assert storage.deleted == []
        assert intent.key in storage.objects
        assert store.db.intents[intent.id].status == FINALIZED

    async def test_failed_orphan_is_deleted_and_stays_failed(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore, storage: FakeObjectStorage
    ) -> None:
        intent = store.add_intent(status=FAILED)
        storage.put(intent.key, 300)
        report = await cleanup.run(TENANT_ID)
        assert report.cleaned == 1
        row = store.db.intents[intent.id]
        assert row.status == FAILED
        assert row.cleaned_at is not None
        assert intent.key not in storage.objects


class TestOperatorEntryPoint:
    async def test_requires_manage_permission(
        self, cleanup: CleanupUploadIntentsUseCase, lawyer: Actor
    ) -> None:
        with pytest.raises(AuthorizationException):
            await cleanup.run_for_actor(lawyer)

    async def test_partner_runs_sweep_for_own_tenant(
        self, cleanup: CleanupUploadIntentsUseCase, store: FakeUploadStore, partner: Actor
    ) -> None:
        store.add_intent()
        report = await cleanup.run_for_actor(partner, take=10, grace_minutes=60)
        assert report.take == 10
        assert report.expired == 1
