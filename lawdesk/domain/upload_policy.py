"""Upload content rules: size limits and the MIME type allow-list."""

from dataclasses import dataclass
from pathlib import PurePosixPath

from lawdesk.domain.exceptions import (
    UnsupportedContentTypeException,
    ValidationException,
)

DEFAULT_ALLOWED_MIME_TYPES: tuple[str, ...] = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
)

_EXTENSION_MIME_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
}


def normalize_content_type(value: str | None) -> str:
    """Lower-case the media type and drop parameters ('text/plain; charset=utf-8' -> 'text/plain')."""
    if not value:
        return ""
    return value.split(";", 1)[0].strip().lower()


def infer_content_type(filename: str) -> str | None:
    """Guess the MIME type from the filename extension (allow-listed types only)."""
    suffix = PurePosixPath(filename or "").suffix.lower()
    return _EXTENSION_MIME_TYPES.get(suffix)


@dataclass(frozen=True)
class UploadContentPolicy:
    """Size and type limits applied before a URL is issued and again at finalize."""

    max_bytes: int
    allowed_mime_types: frozenset[str] = frozenset(DEFAULT_ALLOWED_MIME_TYPES)

    def is_allowed(self, content_type: str | None) -> bool:
        return normalize_content_type(content_type) in self.allowed_mime_types

    def validate_size(self, size: int, intent_id: str | None = None) -> None:
        """Raise ValidationException unless 0 < size <= max_bytes."""
        extra = {"intent_id": intent_id} if intent_id else {}
        if size <= 0:
            raise ValidationException("File is empty", field="file_size", **extra)
        if size > self.max_bytes:
            raise ValidationException(
                f"File exceeds the {self.max_bytes} byte limit",
                field="file_size",
                max_bytes=self.max_bytes,
                **extra,
            )

    def resolve_content_type(self, declared: str | None, filename: str) -> str:
        """Use the declared type if allowed, else infer from the extension.

        Raises:
            UnsupportedContentTypeException: Neither source yields an allowed type.
        """
        normalized = normalize_content_type(declared)
        if normalized in self.allowed_mime_types:
            return normalized
        inferred = infer_content_type(filename)
        if inferred and inferred in self.allowed_mime_types:
            return inferred
        raise UnsupportedContentTypeException(normalized or declared)
