"""DTOs for authenticated callers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserResult:
    """User read-model (result of UserRepository.get_by_id)."""

    id: str
    tenant_id: str
    username: str
    email: str
    role: str
    is_active: bool


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of a use case: who, in which tenant, with which role."""

    user_id: str
    tenant_id: str
    role: str

    @classmethod
    def from_user(cls, user: UserResult) -> "Actor":
        return cls(user_id=user.id, tenant_id=user.tenant_id, role=user.role)
