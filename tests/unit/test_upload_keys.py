"""Object key builder: layout, filename sanitizing and prefix containment."""

import pytest

from lawdesk.domain.upload_keys import ObjectKeyBuilder, sanitize_filename


@pytest.fixture
def builder() -> ObjectKeyBuilder:
    return ObjectKeyBuilder()


class TestSanitizeFilename:
    def test_plain_name_unchanged(self) -> None:
        assert sanitize_filename("brief.pdf") == "brief.pdf"

    def test_posix_path_stripped(self) -> None:
        assert sanitize_filename("/etc/cases/brief.pdf") == "brief.pdf"

    def test_windows_path_stripped(self) -> None:
        assert sanitize_filename("C:\\Users\\me\\brief.pdf") == "brief.pdf"

    def test_control_characters_removed(self) -> None:
        assert sanitize_filename("bri\x00ef\x1f.pdf") == "brief.pdf"

    def test_unsafe_characters_replaced(self) -> None:
        assert sanitize_filename("my brief (v2).pdf") == "my_brief__v2_.pdf"

    def test_empty_falls_back_to_document(self) -> None:
        assert sanitize_filename("") == "document"
        assert sanitize_filename("...") == "document"

    def test_truncated_to_128(self) -> None:
        assert len(sanitize_filename("a" * 300 + ".pdf")) == 128


class TestObjectKeyBuilder:
    def test_prefix_layout(self, builder: ObjectKeyBuilder) -> None:
        assert (
            builder.key_prefix("t1", "c1", "d1", 3)
            == "tenants/t1/cases/c1/documents/d1/v3/"
        )

    def test_build_key_is_deterministic_and_under_prefix(self, builder: ObjectKeyBuilder) -> None:
        key = builder.build_key("t1", "c1", "d1", 1, "attempt1", "brief.pdf")
        assert key == builder.build_key("t1", "c1", "d1", 1, "attempt1", "brief.pdf")
        assert key == "tenants/t1/cases/c1/documents/d1/v1/attempt1-brief.pdf"
        assert key.startswith(builder.key_prefix("t1", "c1", "d1", 1))

    def test_attempts_never_share_a_key(self, builder: ObjectKeyBuilder) -> None:
        first = builder.build_key("t1", "c1", "d1", 2, "a1", "brief.pdf")
        second = builder.build_key("t1", "c1", "d1", 2, "a2", "brief.pdf")
        assert first != second

    def test_invalid_component_rejected(self, builder: ObjectKeyBuilder) -> None:
        with pytest.raises(ValueError, match="tenant_id"):
            builder.key_prefix("../t1", "c1", "d1", 1)
        with pytest.raises(ValueError, match="version"):
            builder.key_prefix("t1", "c1", "d1", 0)

    def test_key_matches_own_prefix(self, builder: ObjectKeyBuilder) -> None:
        key = builder.build_key("t1", "c1", "d1", 1, "a1", "brief.pdf")
        assert builder.key_matches(key, "t1", "c1", "d1", 1)

    def test_v1_does_not_match_v10(self, builder: ObjectKeyBuilder) -> None:
        key = builder.build_key("t1", "c1", "d1", 10, "a1", "brief.pdf")
        assert not builder.key_matches(key, "t1", "c1", "d1", 1)

    def test_other_tenant_case_or_document_rejected(self, builder: ObjectKeyBuilder) -> None:
        key = builder.build_key("t1", "c1", "d1", 1, "a1", "brief.pdf")
        assert not builder.key_matches(key, "t2", "c1", "d1", 1)
        assert not builder.key_matches(key, "t1", "c2", "d1", 1)
        assert not builder.key_matches(key, "t1", "c1", "d2", 1)

    def test_nested_or_bare_prefix_rejected(self, builder: ObjectKeyBuilder) -> None:
        prefix = builder.key_prefix("t1", "c1", "d1", 1)
        assert not builder.key_matches(prefix, "t1", "c1", "d1", 1)
        assert not builder.key_matches(prefix + "x/brief.pdf", "t1", "c1", "d1", 1)

    def test_invalid_components_never_match(self, builder: ObjectKeyBuilder) -> None:
        assert not builder.key_matches("tenants/t1/x", "t/1", "c1", "d1", 1)
