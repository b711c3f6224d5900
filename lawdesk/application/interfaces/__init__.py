"""Application interfaces (ports): repository, store and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from lawdesk.infrastructure.
"""

from lawdesk.application.interfaces.repositories import (
    IDocumentRepository,
    IUploadIntentRepository,
    IUploadRepositories,
    IUploadStore,
    IUserRepository,
)
from lawdesk.application.interfaces.services import ICacheService, ICaseAccessResolver
from lawdesk.application.interfaces.storage import IStorageService

__all__ = [
    "ICacheService",
    "ICaseAccessResolver",
    "IDocumentRepository",
    "IStorageService",
    "IUploadIntentRepository",
    "IUploadRepositories",
    "IUploadStore",
    "IUserRepository",
]
