"""Document use cases: metadata, version history and intent listing (read side)."""

from lawdesk.application.use_cases.documents.document_queries import DocumentQueryService

__all__ = ["DocumentQueryService"]
