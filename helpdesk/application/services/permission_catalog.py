"""Permission catalog: the fixed permission vocabulary and the system role grants.

The catalog is seeded once (RbacInitializationService) and read-only at
runtime. Roles reference permissions by id; the names below are the keys
services check against.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypedDict

from helpdesk.application.dtos.permission import (
    PermissionCategoryGroup,
    PermissionResult,
)
from helpdesk.domain.enums import PermissionCategory, SystemRole

# Permission names checked by services.
VIEW_TICKETS = "view_tickets"
VIEW_ALL_TICKETS = "view_all_tickets"
VIEW_TICKET_DETAILS = "view_ticket_details"
CREATE_TICKETS = "create_tickets"
EDIT_TICKETS = "edit_tickets"
DELETE_TICKETS = "delete_tickets"
CHANGE_TICKET_STATUS = "change_ticket_status"
ASSIGN_TICKETS = "assign_tickets"
ADD_COMMENTS = "add_comments"
ADD_INTERNAL_COMMENTS = "add_internal_comments"
VIEW_STATISTICS = "view_statistics"
MANAGE_USERS = "manage_users"
MANAGE_ROLES = "manage_roles"
VIEW_NOTIFICATIONS = "view_notifications"


class PermissionData(TypedDict):
    name: str
    display_name: str
    description: str
    category: str


class RoleData(TypedDict):
    """Role configuration for the seeded system roles."""

    display_name: str
    description: str
    permissions: list[str]


SYSTEM_PERMISSIONS: list[PermissionData] = [
    {
        "name": VIEW_TICKETS,
        "display_name": "Ver tickets",
        "description": "Permite ver la lista de tickets",
        "category": PermissionCategory.TICKETS.value,
    },
    {
        "name": VIEW_ALL_TICKETS,
        "display_name": "Ver todos los tickets",
        "description": "Permite ver todos los tickets del sistema",
        "category": PermissionCategory.TICKETS.value,
    },
    {
        "name": VIEW_TICKET_DETAILS,
        "display_name": "Ver detalles de tickets",
        "description": "Permite ver los detalles completos de un ticket",
        "category": PermissionCategory.TICKETS.value,
    },
    {
        "name": CREATE_TICKETS,
        "display_name": "Crear tickets",
        "description": "Permite crear nuevos tickets desde el panel admin",
        "category": PermissionCategory.TICKETS.value,
    },
    {
        "name": EDIT_TICKETS,
        "display_name": "Editar tickets",
        "description": "Permite editar información de tickets",
        "category": PermissionCategory.TICKETS.value,
    },
    {
        "name": DELETE_TICKETS,
        "display_name": "Eliminar tickets",
        "description": "Permite eliminar tickets",
        "category": PermissionCategory.TICKETS.value,
    },
    {
        "name": CHANGE_TICKET_STATUS,
        "display_name": "Cambiar estado de tickets",
        "description": "Permite cambiar el estado de los tickets",
        "category": PermissionCategory.TICKETS.value,
    },
    {
        "name": ASSIGN_TICKETS,
        "display_name": "Asignar tickets",
        "description": "Permite asignar tickets a técnicos",
        "category": PermissionCategory.TICKETS.value,
    },
    {
        "name": ADD_COMMENTS,
        "display_name": "Agregar comentarios",
        "description": "Permite agregar comentarios públicos",
        "category": PermissionCategory.COMMENTS.value,
    },
    {
        "name": ADD_INTERNAL_COMMENTS,
        "display_name": "Agregar comentarios internos",
        "description": "Permite agregar comentarios internos",
        "category": PermissionCategory.COMMENTS.value,
    },
    {
        "name": VIEW_STATISTICS,
        "display_name": "Ver estadísticas",
        "description": "Permite ver estadísticas del sistema",
        "category": PermissionCategory.STATISTICS.value,
    },
    {
        "name": MANAGE_USERS,
        "display_name": "Gestionar usuarios",
        "description": "Permite crear, editar y eliminar usuarios",
        "category": PermissionCategory.ADMINISTRATION.value,
    },
    {
        "name": MANAGE_ROLES,
        "display_name": "Gestionar roles",
        "description": "Permite crear y editar roles y permisos",
        "category": PermissionCategory.ADMINISTRATION.value,
    },
    {
        "name": VIEW_NOTIFICATIONS,
        "display_name": "Ver notificaciones",
        "description": "Permite recibir y ver notificaciones",
        "category": PermissionCategory.NOTIFICATIONS.value,
    },
]

_SUPERVISOR_PERMISSIONS = [
    VIEW_TICKETS,
    VIEW_ALL_TICKETS,
    VIEW_TICKET_DETAILS,
    CHANGE_TICKET_STATUS,
    ASSIGN_TICKETS,
    ADD_COMMENTS,
    ADD_INTERNAL_COMMENTS,
    VIEW_STATISTICS,
    VIEW_NOTIFICATIONS,
]

SYSTEM_ROLES: dict[str, RoleData] = {
    SystemRole.ADMIN.value: {
        "display_name": "👑 Administrador",
        "description": "Acceso total al sistema",
        "permissions": [p["name"] for p in SYSTEM_PERMISSIONS],
    },
    SystemRole.SUPERVISOR.value: {
        "display_name": "👁️ Supervisor",
        "description": "Puede gestionar tickets y asignar técnicos",
        "permissions": list(_SUPERVISOR_PERMISSIONS),
    },
    SystemRole.TECNICO.value: {
        "display_name": "🔧 Técnico",
        "description": "Puede ver y trabajar en tickets asignados",
        "permissions": [
            p
            for p in _SUPERVISOR_PERMISSIONS
            if p not in (ASSIGN_TICKETS, VIEW_STATISTICS)
        ],
    },
}

# Users holding these roles receive new_ticket and high_priority alerts.
STAFF_NOTIFICATION_ROLES: tuple[str, ...] = (
    SystemRole.ADMIN.value,
    SystemRole.SUPERVISOR.value,
)

# Users holding these roles can be picked as ticket assignees.
ASSIGNABLE_ROLES: tuple[str, ...] = (
    SystemRole.ADMIN.value,
    SystemRole.SUPERVISOR.value,
    SystemRole.TECNICO.value,
)


def permission_names() -> list[str]:
    return [p["name"] for p in SYSTEM_PERMISSIONS]


def group_by_category(
    permissions: Iterable[PermissionResult],
) -> list[PermissionCategoryGroup]:
    """Group permissions by category in catalog order; unknown categories go last."""
    order = {c: i for i, c in enumerate(PermissionCategory.values())}
    grouped: dict[str, list[PermissionResult]] = {}
    for perm in permissions:
        grouped.setdefault(perm.category, []).append(perm)
    return [
        PermissionCategoryGroup(
            category=category,
            permissions=sorted(grouped[category], key=lambda p: p.name),
        )
        for category in sorted(grouped, key=lambda c: (order.get(c, len(order)), c))
    ]
