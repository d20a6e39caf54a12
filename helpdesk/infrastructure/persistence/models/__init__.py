"""Persistence models: ORM entities and mixins."""

from helpdesk.infrastructure.persistence.models.comment import Comment
from helpdesk.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    TimestampMixin,
)
from helpdesk.infrastructure.persistence.models.notification import Notification
from helpdesk.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
)
from helpdesk.infrastructure.persistence.models.role import Role
from helpdesk.infrastructure.persistence.models.ticket import Ticket
from helpdesk.infrastructure.persistence.models.user import User

__all__ = [
    "Comment",
    "CreatedAtMixin",
    "CuidMixin",
    "Notification",
    "Permission",
    "Role",
    "RolePermission",
    "Ticket",
    "TimestampMixin",
    "User",
]
