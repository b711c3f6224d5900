"""Application services: authorization and storage visibility checks."""

from lawdesk.application.services.authorization_service import AuthorizationService
from lawdesk.application.services.storage_probe import head_object_with_retry

__all__ = ["AuthorizationService", "head_object_with_retry"]
