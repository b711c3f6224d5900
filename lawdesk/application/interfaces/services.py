"""Service interfaces (ports) for the application layer."""

from typing import Any, Protocol


class ICacheService(Protocol):
    """Protocol for cache (e.g. Redis) used by authorization."""

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""
        ...

    async def get(self, key: str) -> Any | None:
        """Return cached value or None."""
        ...

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL in seconds."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key from cache."""
        ...


class ICaseAccessResolver(Protocol):
    """Decides whether a user may see a case (existence + membership)."""

    async def can_access_case(
        self,
        tenant_id: str,
        user_id: str,
        role: str,
        case_id: str,
    ) -> bool:
        """Return True if the case exists in the tenant and the user may see it."""
        ...
