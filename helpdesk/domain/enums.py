"""Domain enumerations for the helpdesk.

Enums represent fixed sets of domain values. Ticket values are stored
verbatim in the database and shown to users, so they stay in Spanish.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TicketStatus(_ValuesMixin, str, Enum):
    """Ticket status. Any status may move to any other (no transition guards)."""

    PENDIENTE = "Pendiente"
    EN_PROCESO = "En Proceso"
    RESUELTO = "Resuelto"
    CERRADO = "Cerrado"

    @property
    def is_terminal(self) -> bool:
        """Resuelto and Cerrado notify the assignee on status change."""
        return self in (TicketStatus.RESUELTO, TicketStatus.CERRADO)


class SupportType(_ValuesMixin, str, Enum):
    """Kind of help requested."""

    HARDWARE = "Hardware"
    SOFTWARE = "Software"
    RED = "Red e Internet"
    ACCESO = "Acceso y Permisos"
    CORREO = "Correo Electrónico"
    OTRO = "Otro"


class TicketPriority(_ValuesMixin, str, Enum):
    """Requester-declared urgency, lowest to highest."""

    BAJA = "Baja – No es urgente"
    MEDIA = "Media – Puede esperar unas horas"
    ALTA = "Alta – Necesito ayuda pronto"
    CRITICA = "Crítica – Bloquea mi trabajo"

    @property
    def is_top_tier(self) -> bool:
        """Only the highest tier raises a high_priority alert when unassigned."""
        return self is TicketPriority.CRITICA


class NotificationType(_ValuesMixin, str, Enum):
    """In-app notification tag."""

    NEW_TICKET = "new_ticket"
    TICKET_ASSIGNED = "ticket_assigned"
    NEW_COMMENT = "new_comment"
    STATUS_CHANGE = "status_change"
    HIGH_PRIORITY = "high_priority"


class PermissionCategory(_ValuesMixin, str, Enum):
    """Grouping used to present the permission catalog."""

    TICKETS = "tickets"
    COMMENTS = "comments"
    STATISTICS = "statistics"
    ADMINISTRATION = "administration"
    NOTIFICATIONS = "notifications"


class SystemRole(_ValuesMixin, str, Enum):
    """Roles seeded at bootstrap. Never deletable, never renamed."""

    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    TECNICO = "tecnico"
