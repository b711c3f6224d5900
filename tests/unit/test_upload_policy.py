"""Upload content policy: size limits and MIME allow-list."""

import pytest

from lawdesk.domain.exceptions import UnsupportedContentTypeException, ValidationException
from lawdesk.domain.upload_policy import (
    UploadContentPolicy,
    infer_content_type,
    normalize_content_type,
)

PDF = "application/pdf"


@pytest.fixture
def policy() -> UploadContentPolicy:
    return UploadContentPolicy(max_bytes=1000)


def test_normalize_drops_parameters_and_case() -> None:
    assert normalize_content_type("Text/Plain; charset=UTF-8") == "text/plain"
    assert normalize_content_type(None) == ""


def test_infer_from_extension() -> None:
    assert infer_content_type("Brief.PDF") == PDF
    assert infer_content_type("notes.exe") is None


class TestValidateSize:
    def test_within_limit(self, policy: UploadContentPolicy) -> None:
        policy.validate_size(1)
        policy.validate_size(1000)

    def test_empty_rejected(self, policy: UploadContentPolicy) -> None:
        with pytest.raises(ValidationException) as exc_info:
            policy.validate_size(0)
        assert exc_info.value.details["field"] == "file_size"

    def test_over_limit_rejected_with_intent(self, policy: UploadContentPolicy) -> None:
        with pytest.raises(ValidationException) as exc_info:
            policy.validate_size(1001, intent_id="i1")
        assert exc_info.value.details["max_bytes"] == 1000
        assert exc_info.value.details["intent_id"] == "i1"
        assert exc_info.value.retryable is False


class TestResolveContentType:
    def test_declared_allowed_type_wins(self, policy: UploadContentPolicy) -> None:
        assert policy.resolve_content_type("text/plain", "brief.pdf") == "text/plain"

    def test_falls_back_to_extension(self, policy: UploadContentPolicy) -> None:
        assert policy.resolve_content_type("application/octet-stream", "brief.pdf") == PDF
        assert policy.resolve_content_type(None, "brief.pdf") == PDF

    def test_rejects_unknown(self, policy: UploadContentPolicy) -> None:
        with pytest.raises(UnsupportedContentTypeException) as exc_info:
            policy.resolve_content_type("image/png", "photo.png")
        assert exc_info.value.error_code == "UNSUPPORTED_CONTENT_TYPE"

    def test_custom_allow_list(self) -> None:
        policy = UploadContentPolicy(max_bytes=10, allowed_mime_types=frozenset({"text/plain"}))
        assert policy.is_allowed("text/plain; charset=utf-8")
        assert not policy.is_allowed(PDF)
        with pytest.raises(UnsupportedContentTypeException):
            policy.resolve_content_type(None, "brief.pdf")
