"""Upload and document endpoints over HTTP with use cases wired to in-memory fakes.

Authentication runs for real (JWT + tenant header); only the user lookup and
the use cases are overridden.
"""

from pathlib import Path

import pytest
from httpx import AsyncClient

from fakes import LAWYER_ID, PARTNER_ID, TENANT_ID, FakeUploadStore, FakeUserRepository
from lawdesk.api.v1.dependencies import (
    get_cleanup_use_case,
    get_document_query_service,
    get_local_storage,
    get_upload_coordinator,
    get_user_repo,
)
from lawdesk.application.dtos.user import UserResult
from lawdesk.application.services.authorization_service import AuthorizationService
from lawdesk.application.use_cases.documents import DocumentQueryService
from lawdesk.application.use_cases.uploads import (
    CleanupUploadIntentsUseCase,
    UploadCoordinator,
)
from lawdesk.domain.upload_policy import UploadContentPolicy
from lawdesk.infrastructure.external.storage.local_storage import LocalStorageService
from lawdesk.infrastructure.security.jwt import create_access_token
from lawdesk.main import app

PDF_BYTES = b"%PDF-1.7\n" + b"0" * 1015


def _user(user_id: str, role: str, tenant_id: str = TENANT_ID) -> UserResult:
    return UserResult(
        id=user_id,
        tenant_id=tenant_id,
        username=user_id,
        email=f"{user_id}@firm.test",
        role=role,
        is_active=True,
    )


def _headers(user_id: str = LAWYER_ID, tenant_id: str = TENANT_ID) -> dict[str, str]:
    token = create_access_token({"sub": user_id, "tenant_id": TENANT_ID})
    return {"Authorization": f"Bearer {token}", "X-Tenant-ID": tenant_id}


@pytest.fixture
def local_storage(tmp_path: Path) -> LocalStorageService:
    return LocalStorageService(str(tmp_path))


@pytest.fixture
def wired(
    store: FakeUploadStore,
    local_storage: LocalStorageService,
    authorization: AuthorizationService,
) -> FakeUploadStore:
    """Override user lookup, use cases and the local storage endpoint backend."""
    store.add_user(_user(LAWYER_ID, "lawyer"))
    store.add_user(_user(PARTNER_ID, "partner"))
    coordinator = UploadCoordinator(
        store=store,
        storage=local_storage,
        authorization=authorization,
        policy=UploadContentPolicy(max_bytes=10 * 1024 * 1024),
        head_backoff_seconds=0,
    )
    app.dependency_overrides[get_user_repo] = lambda: FakeUserRepository(store.db)
    app.dependency_overrides[get_upload_coordinator] = lambda: coordinator
    app.dependency_overrides[get_document_query_service] = lambda: DocumentQueryService(
        store=store, storage=local_storage, authorization=authorization
    )
    app.dependency_overrides[get_cleanup_use_case] = lambda: CleanupUploadIntentsUseCase(
        store=store, storage=local_storage, authorization=authorization
    )
    app.dependency_overrides[get_local_storage] = lambda: local_storage
    return store


async def _initiate(client: AsyncClient, size: int = len(PDF_BYTES), **extra) -> dict:
    body = {"filename": "brief.pdf", "file_size": size, "case_id": "case1", **extra}
    response = await client.post("/api/v1/uploads/initiate", json=body, headers=_headers())
    assert response.status_code == 201, response.text
    return response.json()


async def _put(client: AsyncClient, initiated: dict, content: bytes = PDF_BYTES):
    return await client.put(
        initiated["upload_url"], content=content, headers=initiated["upload_headers"]
    )


def _finalize_body(initiated: dict) -> dict:
    return {
        "document_id": initiated["document_id"],
        "expected_version": initiated["expected_version"],
        "key": initiated["key"],
        "filename": "brief.pdf",
        "intent_id": initiated["intent_id"],
    }


class TestAuthentication:
    async def test_missing_token(self, client: AsyncClient, wired) -> None:
        response = await client.post(
            "/api/v1/uploads/initiate",
            json={"filename": "a.pdf", "file_size": 1, "case_id": "case1"},
            headers={"X-Tenant-ID": TENANT_ID},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_ERROR"

    async def test_invalid_token(self, client: AsyncClient, wired) -> None:
        response = await client.get(
            "/api/v1/documents/doc1",
            headers={"Authorization": "Bearer not-a-jwt", "X-Tenant-ID": TENANT_ID},
        )
        assert response.status_code == 401

    async def test_missing_tenant_header(self, client: AsyncClient, wired) -> None:
        headers = _headers()
        del headers["X-Tenant-ID"]
        response = await client.get("/api/v1/documents/doc1", headers=headers)
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    async def test_token_for_other_tenant(self, client: AsyncClient, wired) -> None:
        response = await client.get("/api/v1/documents/doc1", headers=_headers(tenant_id="tenant2"))
        assert response.status_code == 403
        assert response.json()["error"] == "PERMISSION_DENIED"


class TestUploadFlow:
    async def test_initiate_put_finalize_read(self, client: AsyncClient, wired) -> None:
        initiated = await _initiate(client, title="Opening brief")
        assert initiated["expected_version"] == 1
        assert initiated["upload_method"] == "PUT"
        assert initiated["expected_content_type"] == "application/pdf"

        put = await _put(client, initiated)
        assert put.status_code == 200
        assert put.json() == {"key": initiated["key"], "size": len(PDF_BYTES)}

        finalized = await client.post(
            "/api/v1/uploads/finalize", json=_finalize_body(initiated), headers=_headers()
        )
        assert finalized.status_code == 200, finalized.text
        assert finalized.json()["version"] == 1
        assert finalized.json()["idempotent"] is False

        again = await client.post(
            "/api/v1/uploads/finalize", json=_finalize_body(initiated), headers=_headers()
        )
        assert again.status_code == 200
        assert again.json()["idempotent"] is True

        document_id = initiated["document_id"]
        document = await client.get(f"/api/v1/documents/{document_id}", headers=_headers())
        assert document.status_code == 200
        assert document.json()["title"] == "Opening brief"
        assert document.json()["file_key"] == initiated["key"]

        versions = await client.get(f"/api/v1/documents/{document_id}/versions", headers=_headers())
        assert [v["version"] for v in versions.json()] == [1]

        link = await client.get(
            f"/api/v1/documents/{document_id}/versions/{versions.json()[0]['id']}/download-url",
            headers=_headers(),
        )
        assert link.status_code == 200
        download = await client.get(link.json()["url"])
        assert download.status_code == 200
        assert download.content == PDF_BYTES
        assert "Opening_brief" in download.headers["content-disposition"]

    async def test_size_mismatch(self, client: AsyncClient, wired) -> None:
        initiated = await _initiate(client, size=len(PDF_BYTES) + 1)
        await _put(client, initiated)
        response = await client.post(
            "/api/v1/uploads/finalize", json=_finalize_body(initiated), headers=_headers()
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "UPLOAD_SIZE_MISMATCH"
        assert body["details"]["intent_id"] == initiated["intent_id"]

    async def test_finalize_before_put_is_retryable(self, client: AsyncClient, wired) -> None:
        initiated = await _initiate(client)
        response = await client.post(
            "/api/v1/uploads/finalize", json=_finalize_body(initiated), headers=_headers()
        )
        assert response.status_code == 409
        assert response.json()["error"] == "STORAGE_OBJECT_NOT_VISIBLE"
        assert response.json()["details"]["retryable"] is True

    async def test_version_conflict(self, client: AsyncClient, wired) -> None:
        wired.add_committed_version(TENANT_ID, "case1", "doc1", 1, "k1")
        first = await _initiate(client, document_id="doc1", case_id=None)
        second = await _initiate(client, document_id="doc1", case_id=None)
        assert first["expected_version"] == second["expected_version"] == 2
        await _put(client, first)
        await _put(client, second)

        ok = await client.post(
            "/api/v1/uploads/finalize", json=_finalize_body(first), headers=_headers()
        )
        assert ok.status_code == 200
        conflict = await client.post(
            "/api/v1/uploads/finalize", json=_finalize_body(second), headers=_headers()
        )
        assert conflict.status_code == 409
        assert conflict.json()["error"] == "DOCUMENT_VERSION_CONFLICT"

    async def test_unsupported_type(self, client: AsyncClient, wired) -> None:
        response = await client.post(
            "/api/v1/uploads/initiate",
            json={"filename": "x.exe", "file_size": 10, "case_id": "case1"},
            headers=_headers(),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "UNSUPPORTED_CONTENT_TYPE"

    async def test_both_targets_rejected(self, client: AsyncClient, wired) -> None:
        response = await client.post(
            "/api/v1/uploads/initiate",
            json={"filename": "a.pdf", "file_size": 10, "case_id": "case1", "document_id": "d"},
            headers=_headers(),
        )
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"


class TestLimits:
    async def test_initiate_rate_limit(self, client: AsyncClient, wired, settings_env) -> None:
        settings_env(UPLOAD_INITIATE_RATE_LIMIT="2/minute")
        await _initiate(client)
        await _initiate(client)
        response = await client.post(
            "/api/v1/uploads/initiate",
            json={"filename": "brief.pdf", "file_size": 10, "case_id": "case1"},
            headers=_headers(),
        )
        assert response.status_code == 429
        assert response.json()["error"] == "RATE_LIMITED"

    async def test_oversized_json_body(self, client: AsyncClient, wired) -> None:
        response = await client.post(
            "/api/v1/uploads/initiate",
            content=b"x" * (1024 * 1024 + 1),
            headers={**_headers(), "Content-Type": "application/json"},
        )
        assert response.status_code == 413
        assert response.json()["error"] == "PAYLOAD_TOO_LARGE"


class TestUploadIntents:
    async def test_lawyer_cannot_list(self, client: AsyncClient, wired) -> None:
        response = await client.get("/api/v1/upload-intents", headers=_headers())
        assert response.status_code == 403

    async def test_partner_lists_and_cleans(self, client: AsyncClient, wired) -> None:
        stale = wired.add_intent()
        listed = await client.get(
            "/api/v1/upload-intents", params={"take": 5}, headers=_headers(PARTNER_ID)
        )
        assert listed.status_code == 200
        assert [i["id"] for i in listed.json()["items"]] == [stale.id]
        assert listed.json()["counts"]["INITIATED"] == 1

        cleaned = await client.post(
            "/api/v1/upload-intents/cleanup", json={"dry_run": False}, headers=_headers(PARTNER_ID)
        )
        assert cleaned.status_code == 200, cleaned.text
        assert cleaned.json()["expired"] == 1


class TestLocalStorageEndpoints:
    async def test_put_token_is_single_use(
        self, client: AsyncClient, local_storage: LocalStorageService, wired
    ) -> None:
        initiated = await _initiate(client)
        assert (await _put(client, initiated)).status_code == 200
        reused = await _put(client, initiated)
        assert reused.status_code == 404

    async def test_put_with_other_content_type(self, client: AsyncClient, wired) -> None:
        initiated = await _initiate(client)
        response = await client.put(
            initiated["upload_url"], content=PDF_BYTES, headers={"Content-Type": "text/html"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    async def test_unknown_download_token(self, client: AsyncClient, wired) -> None:
        response = await client.get("/api/v1/storage/downloads/nope")
        assert response.status_code == 404
