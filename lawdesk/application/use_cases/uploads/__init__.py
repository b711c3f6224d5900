"""Upload use cases: initiate/finalize coordinator and intent cleanup."""

from lawdesk.application.use_cases.uploads.cleanup_upload_intents import (
    CleanupUploadIntentsUseCase,
)
from lawdesk.application.use_cases.uploads.upload_coordinator import UploadCoordinator

__all__ = ["CleanupUploadIntentsUseCase", "UploadCoordinator"]
