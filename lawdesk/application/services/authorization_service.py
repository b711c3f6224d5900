"""Authorization service: tenant permission checks plus case access (ICaseAccessResolver + cache)."""

from __future__ import annotations

from lawdesk.application.dtos.user import Actor
from lawdesk.application.interfaces.services import ICacheService, ICaseAccessResolver
from lawdesk.domain.exceptions import AuthorizationException
from lawdesk.domain.permissions import CASE_VIEW, role_has_permission, split_permission


class AuthorizationService:
    """Centralized permission checking; caches positive case decisions when a cache is available."""

    def __init__(
        self,
        case_access_resolver: ICaseAccessResolver,
        cache: ICacheService | None = None,
        cache_ttl: int = 300,
    ) -> None:
        self.case_access_resolver = case_access_resolver
        self.cache = cache
        self.cache_ttl = cache_ttl

    def check_permission(self, actor: Actor, permission: str) -> bool:
        """Return True if the actor's tenant role grants the permission code."""
        return role_has_permission(actor.role, permission)

    def require_permission(self, actor: Actor, permission: str) -> None:
        """Raise AuthorizationException if the actor's role lacks permission."""
        if not self.check_permission(actor, permission):
            resource, action = split_permission(permission)
            raise AuthorizationException(resource=resource, action=action)

    async def can_access_case(self, actor: Actor, case_id: str, fresh: bool = False) -> bool:
        """Return True if the actor can see the case.

        fresh=True skips the cached decision and asks the resolver; a denial
        then also evicts any cached grant.
        """
        key = f"case_access:{actor.tenant_id}:{actor.user_id}:{case_id}"
        cache_ready = bool(self.cache and self.cache.is_available())
        if cache_ready and not fresh:
            if await self.cache.get(key):
                return True
        allowed = await self.case_access_resolver.can_access_case(
            actor.tenant_id, actor.user_id, actor.role, case_id
        )
        if cache_ready:
            if allowed:
                await self.cache.set(key, True, ttl=self.cache_ttl)
            elif fresh:
                await self.cache.delete(key)
        return allowed

    async def require_case_access(
        self,
        actor: Actor,
        case_id: str,
        permission: str = CASE_VIEW,
        fresh: bool = False,
    ) -> None:
        """Raise AuthorizationException unless the actor holds permission and can see the case.

        A missing case is reported the same way as a forbidden one. Pass
        fresh=True where a stale cached grant must not be trusted.
        """
        self.require_permission(actor, permission)
        if not await self.can_access_case(actor, case_id, fresh=fresh):
            raise AuthorizationException(
                resource="case", action=split_permission(permission)[1]
            )
