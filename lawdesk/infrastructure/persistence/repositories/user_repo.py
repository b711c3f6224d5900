"""User repository. Interface methods return application DTOs."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.application.dtos.user import UserResult
from lawdesk.infrastructure.persistence.models.user import User
from lawdesk.infrastructure.persistence.repositories.base import BaseRepository


def _user_to_result(u: User) -> UserResult:
    """Map ORM User to application UserResult."""
    return UserResult(
        id=u.id,
        tenant_id=u.tenant_id,
        username=u.username,
        email=u.email,
        role=u.role,
        is_active=u.is_active,
    )


class UserRepository(BaseRepository[User]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_by_id(self, user_id: str) -> UserResult | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        return _user_to_result(user) if user else None
