"""Domain layer: enums and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from helpdesk.domain.enums import (
    NotificationType,
    PermissionCategory,
    SupportType,
    SystemRole,
    TicketPriority,
    TicketStatus,
)
from helpdesk.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ConflictException,
    DuplicateKeyException,
    HelpdeskException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    "AuthenticationException",
    "AuthorizationException",
    "ConflictException",
    "DuplicateKeyException",
    "HelpdeskException",
    "NotificationType",
    "PermissionCategory",
    "ResourceNotFoundException",
    "SupportType",
    "SystemRole",
    "TicketPriority",
    "TicketStatus",
    "ValidationException",
]
