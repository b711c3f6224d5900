"""Run the upload intent cleanup sweep: reclaim objects of abandoned uploads.

Usage:
    python -m scripts.cleanup_upload_intents [tenant_id_or_code] [--dry-run]
If tenant is omitted, processes all active tenants.
Requires Postgres (a role with BYPASSRLS to list tenants) and the storage settings.
"""

import asyncio
import sys

from lawdesk.application.use_cases.uploads import CleanupUploadIntentsUseCase
from lawdesk.core.config import get_settings
from lawdesk.core.tenant_context import set_tenant_id
from lawdesk.infrastructure.external.storage.factory import StorageFactory
from lawdesk.infrastructure.persistence.database import dispose_engine, get_session_factory
from lawdesk.infrastructure.persistence.repositories import TenantRepository
from lawdesk.infrastructure.persistence.upload_store import SqlUploadStore
from lawdesk.shared.telemetry.logging import setup_logging


async def main() -> None:
    """For each tenant, run one cleanup batch and print its report."""
    settings = get_settings()
    setup_logging()
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    dry_run = "--dry-run" in sys.argv[1:]
    tenant_filter = args[0] if args else None

    session_factory = get_session_factory()
    async with session_factory() as session:
        async with session.begin():
            tenants = await TenantRepository(session).list_active()
    if tenant_filter:
        tenants = [t for t in tenants if tenant_filter in (t.id, t.code)]
        if not tenants:
            print(f"Tenant not found: {tenant_filter}", file=sys.stderr)
            sys.exit(1)

    cleanup = CleanupUploadIntentsUseCase(
        store=SqlUploadStore(session_factory),
        storage=StorageFactory.create_storage_service(settings),
    )
    total_deleted_bytes = 0
    try:
        for tenant in tenants:
            set_tenant_id(tenant.id)
            report = await cleanup.run(
                tenant.id,
                take=settings.upload_intent_cleanup_batch_size,
                grace_minutes=settings.upload_intent_cleanup_grace_minutes,
                dry_run=dry_run,
            )
            total_deleted_bytes += report.deleted_bytes
            print(
                f"Tenant {tenant.code}: recovered={report.recovered} cleaned={report.cleaned} "
                f"expired={report.expired} failed={report.failed} "
                f"deleted_bytes={report.deleted_bytes}"
            )
    finally:
        set_tenant_id(None)
        await dispose_engine()

    print(f"Done. Total deleted bytes: {total_deleted_bytes}")


if __name__ == "__main__":
    asyncio.run(main())
