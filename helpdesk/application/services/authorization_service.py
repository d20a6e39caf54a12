"""Authorization service: live permission checks (IPermissionResolver per read session).

Nothing is cached: every check reads the current role grants, so a change
to a role is visible to the next request of every user holding it.
"""

from __future__ import annotations

from helpdesk.application.interfaces.repositories import ITransactionCoordinator
from helpdesk.application.interfaces.services import PermissionResolverFactory
from helpdesk.domain.exceptions import AuthorizationException


class AuthorizationService:
    """Centralized permission checking. Unknown users have no permissions."""

    def __init__(
        self,
        coordinator: ITransactionCoordinator,
        resolver_factory: PermissionResolverFactory,
    ) -> None:
        self._coordinator = coordinator
        self._resolver_factory = resolver_factory

    async def has_permission(self, user_id: str, permission_name: str) -> bool:
        """Return True if the user's role currently grants permission_name."""
        async with self._coordinator.read() as repos:
            resolver = self._resolver_factory(repos.session)
            return await resolver.has_permission(user_id, permission_name)

    async def has_any_permission(
        self, user_id: str, permission_names: list[str]
    ) -> bool:
        """Return True if any of permission_names is granted. Empty list is False."""
        if not permission_names:
            return False
        async with self._coordinator.read() as repos:
            resolver = self._resolver_factory(repos.session)
            return await resolver.has_any_permission(user_id, list(permission_names))

    async def effective_permissions(self, user_id: str) -> set[str]:
        """All permission names of the user's role. For UI affordances, not for gating."""
        async with self._coordinator.read() as repos:
            resolver = self._resolver_factory(repos.session)
            return await resolver.get_user_permissions(user_id)

    async def require_permission(
        self, user_id: str, permission_name: str, resource: str | None = None
    ) -> None:
        """Raise AuthorizationException if user lacks permission."""
        if not await self.has_permission(user_id, permission_name):
            raise AuthorizationException(resource=resource, action=permission_name)

    async def require_any_permission(
        self, user_id: str, permission_names: list[str], resource: str | None = None
    ) -> None:
        if not await self.has_any_permission(user_id, permission_names):
            raise AuthorizationException(
                resource=resource, action=" | ".join(permission_names) or None
            )
