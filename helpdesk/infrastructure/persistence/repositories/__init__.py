"""Repositories: one class per entity over an AsyncSession. They flush, never commit."""

from helpdesk.infrastructure.persistence.repositories.base import BaseRepository
from helpdesk.infrastructure.persistence.repositories.comment_repo import (
    CommentRepository,
)
from helpdesk.infrastructure.persistence.repositories.notification_repo import (
    NotificationRepository,
)
from helpdesk.infrastructure.persistence.repositories.permission_repo import (
    PermissionRepository,
)
from helpdesk.infrastructure.persistence.repositories.role_permission_repo import (
    RolePermissionRepository,
)
from helpdesk.infrastructure.persistence.repositories.role_repo import RoleRepository
from helpdesk.infrastructure.persistence.repositories.ticket_repo import (
    TicketRepository,
)
from helpdesk.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "CommentRepository",
    "NotificationRepository",
    "PermissionRepository",
    "RolePermissionRepository",
    "RoleRepository",
    "TicketRepository",
    "UserRepository",
]
