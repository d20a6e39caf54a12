"""DTOs for the permission catalog (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PermissionResult:
    """Permission read-model."""

    id: str
    name: str
    display_name: str
    description: str | None
    category: str


@dataclass(frozen=True)
class PermissionCategoryGroup:
    """Permissions of one category, ordered by name."""

    category: str
    permissions: list[PermissionResult]
