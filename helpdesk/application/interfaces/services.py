"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from helpdesk.application.dtos.notification import NotificationEvent
    from helpdesk.domain.enums import NotificationType

# Collaborators injected into UserService / RbacInitializationService.
PasswordHasher = Callable[[str], str]
PasswordVerifier = Callable[[str, str], bool]
PasswordRehashCheck = Callable[[str], bool]


class IPermissionResolver(Protocol):
    """Protocol for resolving permissions against current persisted state."""

    async def has_permission(self, user_id: str, permission_name: str) -> bool:
        """Return True if the user's role grants permission_name."""

    async def has_any_permission(
        self, user_id: str, permission_names: list[str]
    ) -> bool:
        """Return True if the user's role grants at least one of permission_names."""

    async def get_user_permissions(self, user_id: str) -> set[str]:
        """Return every permission name granted to the user's role."""


PermissionResolverFactory = Callable[[Any], IPermissionResolver]


class IAuthorizationService(Protocol):
    """Protocol for permission checks used by mutating services."""

    async def has_permission(self, user_id: str, permission_name: str) -> bool: ...

    async def require_permission(
        self, user_id: str, permission_name: str, resource: str | None = None
    ) -> None:
        """Raise AuthorizationException if the user lacks permission_name."""


class INotificationDispatcher(Protocol):
    """Protocol for post-commit notification fan-out."""

    async def dispatch(
        self, event_type: NotificationType, event: NotificationEvent
    ) -> int:
        """Create notification rows for the event's recipients; return rows written."""
