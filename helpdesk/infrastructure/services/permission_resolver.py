"""Resolves user permissions from the database (implements IPermissionResolver).

Every call runs a live query: a permission granted or revoked on a role is
visible to the next check of every user holding that role.
"""

from __future__ import annotations

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
)
from helpdesk.infrastructure.persistence.models.user import User


class PermissionResolver:
    """Resolves user permissions by joining users, role_permissions and permissions."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def has_permission(self, user_id: str, permission_name: str) -> bool:
        """EXISTS over the user's role links. Unknown user resolves to False."""
        query = select(
            exists()
            .where(User.id == user_id)
            .where(RolePermission.role_id == User.role_id)
            .where(Permission.id == RolePermission.permission_id)
            .where(Permission.name == permission_name)
        )
        result = await self.db.execute(query)
        return bool(result.scalar())

    async def has_any_permission(
        self, user_id: str, permission_names: list[str]
    ) -> bool:
        if not permission_names:
            return False
        query = select(
            exists()
            .where(User.id == user_id)
            .where(RolePermission.role_id == User.role_id)
            .where(Permission.id == RolePermission.permission_id)
            .where(Permission.name.in_(permission_names))
        )
        result = await self.db.execute(query)
        return bool(result.scalar())

    async def get_user_permissions(self, user_id: str) -> set[str]:
        """Return the set of permission names granted to the user's role."""
        query = (
            select(Permission.name)
            .select_from(User)
            .join(RolePermission, RolePermission.role_id == User.role_id)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .where(User.id == user_id)
        )
        result = await self.db.execute(query)
        return {row[0] for row in result.fetchall()}
