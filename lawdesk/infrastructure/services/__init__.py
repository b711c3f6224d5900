"""Infrastructure implementations of application service interfaces."""

from lawdesk.infrastructure.services.case_access_resolver import CaseAccessResolver

__all__ = [
    "CaseAccessResolver",
]
