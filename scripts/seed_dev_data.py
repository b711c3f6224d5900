"""Seed a development tenant, one user per role, a case with a lawyer member.

Prints a bearer token per user for trying the upload API.

Usage:
    python -m scripts.seed_dev_data [tenant_code]

Default tenant code: demo. Requires DATABASE_URL (Postgres) and migrated schema
(alembic upgrade head). Existing rows are reused.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import timedelta

from sqlalchemy import select

from lawdesk.core.config import get_settings
from lawdesk.domain.enums import TenantRole, TenantStatus
from lawdesk.infrastructure.persistence.database import (
    dispose_engine,
    get_session_factory,
    set_tenant_context,
)
from lawdesk.infrastructure.persistence.models import CaseMember, LegalCase, Tenant, User
from lawdesk.infrastructure.persistence.repositories import TenantRepository
from lawdesk.infrastructure.security.jwt import create_access_token
from lawdesk.shared.utils.generators import generate_cuid


async def seed(tenant_code: str) -> None:
    settings = get_settings()
    session_factory = get_session_factory()
    async with session_factory() as session:
        async with session.begin():
            tenant = await TenantRepository(session).get_by_code(tenant_code)
            if tenant is None:
                tenant = Tenant(
                    id=generate_cuid(),
                    code=tenant_code,
                    name=f"{tenant_code.title()} Law Firm",
                    status=TenantStatus.ACTIVE.value,
                )
                await set_tenant_context(session, tenant.id)
                session.add(tenant)
                await session.flush()
                print(f"Created tenant {tenant_code} ({tenant.id})")
            else:
                await set_tenant_context(session, tenant.id)

            users: dict[str, User] = {}
            for role in TenantRole:
                username = f"{role.value}@{tenant_code}"
                result = await session.execute(
                    select(User).where(User.tenant_id == tenant.id, User.username == username)
                )
                user = result.scalar_one_or_none()
                if user is None:
                    user = User(
                        tenant_id=tenant.id,
                        username=username,
                        email=f"{role.value}@{tenant_code}.example",
                        role=role.value,
                    )
                    session.add(user)
                    await session.flush()
                users[role.value] = user

            result = await session.execute(
                select(LegalCase).where(
                    LegalCase.tenant_id == tenant.id, LegalCase.title == "Demo v. Example"
                )
            )
            case = result.scalar_one_or_none()
            if case is None:
                case = LegalCase(tenant_id=tenant.id, title="Demo v. Example")
                session.add(case)
                await session.flush()
                session.add(
                    CaseMember(
                        tenant_id=tenant.id,
                        case_id=case.id,
                        user_id=users[TenantRole.LAWYER.value].id,
                    )
                )
            print(f"Case: {case.id}")

    expires = timedelta(minutes=settings.access_token_expire_minutes)
    for role, user in users.items():
        token = create_access_token({"sub": user.id, "tenant_id": tenant.id}, expires)
        print(f"{role:<10} {user.id}  Bearer {token}")
    print(f"Header: {settings.tenant_header_name}: {tenant.id}")


async def main() -> None:
    tenant_code = sys.argv[1] if len(sys.argv) > 1 else "demo"
    try:
        await seed(tenant_code)
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
