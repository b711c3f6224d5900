"""SqlUploadStore against PostgreSQL. Requires a migrated database at DATABASE_URL; skips otherwise."""

from datetime import timedelta

import pytest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from lawdesk.application.dtos.upload import (
    CommitStatus,
    FinalizedUploadCommit,
    UploadIntentCreate,
)
from lawdesk.domain.enums import UploadIntentStatus
from lawdesk.infrastructure.persistence.database import dispose_engine, get_session_factory
from lawdesk.infrastructure.persistence.models import LegalCase, Tenant, User
from lawdesk.infrastructure.persistence.upload_store import SqlUploadStore
from lawdesk.shared.utils.datetime import utc_now
from lawdesk.shared.utils.generators import generate_cuid


@pytest.fixture
async def seeded():
    """Store plus a fresh tenant, case and user ids."""
    factory = get_session_factory()
    try:
        async with factory() as session:
            await session.execute(text("SELECT 1 FROM upload_intent LIMIT 1"))
    except (OSError, SQLAlchemyError) as exc:
        await dispose_engine()
        pytest.skip(f"Postgres not available or not migrated: {exc}")
    tenant = Tenant(code=f"t-{generate_cuid()}", name="Test Firm")
    async with factory() as session:
        async with session.begin():
            session.add(tenant)
            await session.flush()
            case = LegalCase(tenant_id=tenant.id, title="Smith v. Jones")
            user = User(
                tenant_id=tenant.id,
                username="lawyer",
                email="lawyer@firm.test",
                role="lawyer",
            )
            session.add_all([case, user])
            await session.flush()
            ids = {"tenant": tenant.id, "case": case.id, "user": user.id}
    yield SqlUploadStore(factory), ids
    await dispose_engine()


def _commit(ids: dict, document_id: str, version: int, key: str, **overrides) -> FinalizedUploadCommit:
    values = {
        "tenant_id": ids["tenant"],
        "document_id": document_id,
        "case_id": ids["case"],
        "is_new_document": version == 1,
        "version": version,
        "key": key,
        "content_type": "application/pdf",
        "file_size": 2048,
        "uploader_id": ids["user"],
        "title": "Brief",
        "category": None,
        "notes": None,
        "intent_id": None,
        "result": {},
        "finalized_at": utc_now(),
    }
    values.update(overrides)
    return FinalizedUploadCommit(**values)


@pytest.mark.requires_db
async def test_commit_new_document_and_duplicate(seeded) -> None:
    store, ids = seeded
    document_id = generate_cuid()
    outcome = await store.commit_finalized_upload(_commit(ids, document_id, 1, "k1"))
    assert outcome.status is CommitStatus.COMMITTED

    again = await store.commit_finalized_upload(_commit(ids, document_id, 1, "k1-other"))
    assert again.status is CommitStatus.UNIQUE_CONFLICT

    async with store.transaction() as repos:
        document = await repos.documents.get_by_id(ids["tenant"], document_id)
        versions = await repos.documents.list_versions(ids["tenant"], document_id)
    assert document.file_key == "k1"
    assert [v.id for v in versions] == [outcome.document_version_id]


@pytest.mark.requires_db
async def test_pointer_update_is_conditional(seeded) -> None:
    store, ids = seeded
    document_id = generate_cuid()
    await store.commit_finalized_upload(_commit(ids, document_id, 1, "k1"))

    stale = await store.commit_finalized_upload(
        _commit(ids, document_id, 2, "k2", previous_version=1, previous_file_key="not-k1")
    )
    assert stale.status is CommitStatus.STALE_POINTER

    moved = await store.commit_finalized_upload(
        _commit(ids, document_id, 2, "k2", previous_version=1, previous_file_key="k1")
    )
    assert moved.status is CommitStatus.COMMITTED
    async with store.transaction() as repos:
        versions = await repos.documents.list_versions(ids["tenant"], document_id)
    assert [v.version for v in versions] == [1, 2]


@pytest.mark.requires_db
async def test_commit_finalizes_intent(seeded) -> None:
    store, ids = seeded
    document_id = generate_cuid()
    intent_id = generate_cuid()
    async with store.transaction() as repos:
        await repos.intents.create(
            UploadIntentCreate(
                id=intent_id,
                tenant_id=ids["tenant"],
                kind="document",
                case_id=ids["case"],
                document_id=document_id,
                key=f"key-{intent_id}",
                filename="brief.pdf",
                content_type="application/pdf",
                expected_file_size=2048,
                expected_version=1,
                expires_at=utc_now() + timedelta(minutes=10),
                created_by=ids["user"],
                result={"title": "Brief"},
            )
        )
    outcome = await store.commit_finalized_upload(
        _commit(ids, document_id, 1, f"key-{intent_id}", intent_id=intent_id, result={"title": "Brief"})
    )
    assert outcome.committed
    async with store.transaction() as repos:
        intent = await repos.intents.get_by_id(ids["tenant"], intent_id)
    assert intent.status == UploadIntentStatus.FINALIZED.value
    assert intent.document_version_id == outcome.document_version_id
    assert intent.result["document_version_id"] == outcome.document_version_id


@pytest.mark.requires_db
async def test_commit_rolls_back_when_intent_closed(seeded) -> None:
    store, ids = seeded
    document_id = generate_cuid()
    intent_id = generate_cuid()
    async with store.transaction() as repos:
        await repos.intents.create(
            UploadIntentCreate(
                id=intent_id,
                tenant_id=ids["tenant"],
                kind="document",
                case_id=ids["case"],
                document_id=document_id,
                key=f"key-{intent_id}",
                filename="brief.pdf",
                content_type="application/pdf",
                expected_file_size=2048,
                expected_version=1,
                expires_at=utc_now() - timedelta(days=2),
                created_by=ids["user"],
                result={},
            )
        )
        assert await repos.intents.mark_expired(ids["tenant"], intent_id, utc_now())

    outcome = await store.commit_finalized_upload(
        _commit(ids, document_id, 1, f"key-{intent_id}", intent_id=intent_id)
    )
    assert outcome.status is CommitStatus.INTENT_CLOSED
    async with store.transaction() as repos:
        assert await repos.documents.get_by_id(ids["tenant"], document_id) is None
        assert await repos.documents.list_versions(ids["tenant"], document_id) == []
        intent = await repos.intents.get_by_id(ids["tenant"], intent_id)
    assert intent.status == UploadIntentStatus.EXPIRED.value
