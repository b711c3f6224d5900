"""DocumentQueryService: metadata, version history, download links and intent listing."""

from datetime import timedelta

import pytest

from fakes import CASE_ID, LAWYER_ID, TENANT_ID, FakeClock, FakeUploadStore
from lawdesk.application.dtos.user import Actor
from lawdesk.application.use_cases.documents import DocumentQueryService
from lawdesk.domain.enums import UploadIntentStatus
from lawdesk.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)


@pytest.fixture
def document(store: FakeUploadStore):
    store.add_committed_version(TENANT_ID, CASE_ID, "doc1", 1, "k1", title="Brief")
    return store.add_committed_version(TENANT_ID, CASE_ID, "doc1", 2, "k2", title="Brief")


class TestDocuments:
    async def test_get_document(
        self, query_service: DocumentQueryService, lawyer: Actor, document
    ) -> None:
        result = await query_service.get_document(lawyer, "doc1")
        assert result.version == 2
        assert result.file_key == "k2"

    async def test_viewer_may_read(self, query_service: DocumentQueryService, document) -> None:
        viewer = Actor(user_id=LAWYER_ID, tenant_id=TENANT_ID, role="viewer")
        assert (await query_service.get_document(viewer, "doc1")).id == "doc1"

    async def test_non_member_denied(self, query_service: DocumentQueryService, document) -> None:
        outsider = Actor(user_id="someone", tenant_id=TENANT_ID, role="lawyer")
        with pytest.raises(AuthorizationException):
            await query_service.get_document(outsider, "doc1")

    async def test_other_tenant_sees_nothing(
        self, query_service: DocumentQueryService, document
    ) -> None:
        stranger = Actor(user_id=LAWYER_ID, tenant_id="tenant2", role="partner")
        with pytest.raises(ResourceNotFoundException):
            await query_service.get_document(stranger, "doc1")

    async def test_versions_ascending(
        self, query_service: DocumentQueryService, lawyer: Actor, document
    ) -> None:
        versions = await query_service.list_versions(lawyer, "doc1")
        assert [v.version for v in versions] == [1, 2]

    async def test_download_url(
        self, query_service: DocumentQueryService, lawyer: Actor, clock: FakeClock, document
    ) -> None:
        link = await query_service.get_version_download_url(
            lawyer, "doc1", document.id, expires_in_hours=2
        )
        assert link.version == 2
        assert link.url == "https://storage.test/k2?download=Brief"
        assert link.expires_at == clock.now + timedelta(hours=2)

    async def test_download_url_version_of_other_document(
        self, query_service: DocumentQueryService, store: FakeUploadStore, lawyer: Actor, document
    ) -> None:
        other = store.add_committed_version(TENANT_ID, CASE_ID, "doc2", 1, "k-other")
        with pytest.raises(ResourceNotFoundException):
            await query_service.get_version_download_url(lawyer, "doc1", other.id)

    @pytest.mark.parametrize("hours", [0, 169])
    async def test_download_url_expiry_bounds(
        self, query_service: DocumentQueryService, lawyer: Actor, document, hours: int
    ) -> None:
        with pytest.raises(ValidationException):
            await query_service.get_version_download_url(
                lawyer, "doc1", document.id, expires_in_hours=hours
            )


class TestListUploadIntents:
    async def test_requires_manage_permission(
        self, query_service: DocumentQueryService, lawyer: Actor
    ) -> None:
        with pytest.raises(AuthorizationException):
            await query_service.list_upload_intents(lawyer)

    async def test_newest_first_with_cursor(
        self, query_service: DocumentQueryService, store: FakeUploadStore, partner: Actor
    ) -> None:
        first = store.add_intent()
        second = store.add_intent()
        third = store.add_intent()
        page = await query_service.list_upload_intents(partner, take=2)
        assert [i.id for i in page.items] == [third.id, second.id]
        assert page.next_cursor == second.id
        rest = await query_service.list_upload_intents(partner, take=2, cursor=page.next_cursor)
        assert [i.id for i in rest.items] == [first.id]
        assert rest.next_cursor is None

    async def test_status_filter_and_counts(
        self, query_service: DocumentQueryService, store: FakeUploadStore, partner: Actor
    ) -> None:
        store.add_intent()
        failed = store.add_intent(status=UploadIntentStatus.FAILED.value)
        page = await query_service.list_upload_intents(partner, status="FAILED")
        assert [i.id for i in page.items] == [failed.id]
        assert page.counts == {"INITIATED": 1, "FINALIZED": 0, "FAILED": 1, "EXPIRED": 0}

    async def test_text_query(
        self, query_service: DocumentQueryService, store: FakeUploadStore, partner: Actor
    ) -> None:
        store.add_intent(filename="brief.pdf")
        match = store.add_intent(filename="Engagement-Letter.pdf")
        page = await query_service.list_upload_intents(partner, query="  engagement ")
        assert [i.id for i in page.items] == [match.id]

    async def test_unknown_status(self, query_service: DocumentQueryService, partner: Actor) -> None:
        with pytest.raises(ValidationException):
            await query_service.list_upload_intents(partner, status="DONE")

    @pytest.mark.parametrize("take", [0, 201])
    async def test_take_bounds(
        self, query_service: DocumentQueryService, partner: Actor, take: int
    ) -> None:
        with pytest.raises(ValidationException):
            await query_service.list_upload_intents(partner, take=take)
