"""Storage: local filesystem and S3-compatible backends.

Factory creates backend from lawdesk.core.config. Implementations are loaded
lazily inside StorageFactory.create_storage_service() so the local backend
does not import boto3.

Implementations satisfy IStorageService (presign_put_object, head_object,
delete_object, generate_download_url).
"""

from lawdesk.infrastructure.external.storage.factory import StorageFactory

__all__ = [
    "StorageFactory",
]
