"""Application services: authorization, roles, users, notifications."""

from helpdesk.application.services.authorization_service import AuthorizationService
from helpdesk.application.services.best_effort import BestEffortPolicy
from helpdesk.application.services.notification_dispatcher import (
    NotificationDispatcher,
)
from helpdesk.application.services.role_service import RoleService
from helpdesk.application.services.user_service import UserService

__all__ = [
    "AuthorizationService",
    "BestEffortPolicy",
    "NotificationDispatcher",
    "RoleService",
    "UserService",
]
