"""DTOs for role use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime

from helpdesk.application.dtos.permission import PermissionResult


@dataclass(frozen=True)
class RoleResult:
    """Role read-model (result of get_by_id, get_by_name, list_roles)."""

    id: str
    name: str
    display_name: str
    description: str | None
    is_system: bool
    created_at: datetime | None = None


@dataclass(frozen=True)
class RoleWithPermissions:
    """Role plus its granted permissions, ordered by category then name."""

    role: RoleResult
    permissions: list[PermissionResult] = field(default_factory=list)


@dataclass(frozen=True)
class RoleUserCount:
    """Row of the role/user-count aggregate."""

    id: str
    name: str
    display_name: str
    user_count: int
    is_system: bool = False
    description: str | None = None

