"""Permission repository: the permission catalog."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.application.dtos.permission import PermissionResult
from helpdesk.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
)
from helpdesk.infrastructure.persistence.repositories.base import BaseRepository


def _permission_to_result(p: Permission) -> PermissionResult:
    return PermissionResult(
        id=p.id,
        name=p.name,
        display_name=p.display_name,
        description=p.description,
        category=p.category,
    )


class PermissionRepository(BaseRepository[Permission]):
    """Permission repository. Catalog listing and id validation."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Permission)

    async def list_all(self) -> list[PermissionResult]:
        """All permissions ordered by category then name."""
        result = await self.db.execute(
            select(Permission).order_by(Permission.category, Permission.name)
        )
        return [_permission_to_result(p) for p in result.scalars().all()]

    async def filter_existing_ids(self, permission_ids: list[str]) -> list[str]:
        """Return the ids that exist, in input order, without duplicates."""
        if not permission_ids:
            return []
        result = await self.db.execute(
            select(Permission.id).where(Permission.id.in_(set(permission_ids)))
        )
        known = set(result.scalars().all())
        seen: set[str] = set()
        ordered: list[str] = []
        for pid in permission_ids:
            if pid in known and pid not in seen:
                seen.add(pid)
                ordered.append(pid)
        return ordered

    async def list_for_role(self, role_id: str) -> list[PermissionResult]:
        result = await self.db.execute(
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.category, Permission.name)
        )
        return [_permission_to_result(p) for p in result.scalars().all()]
