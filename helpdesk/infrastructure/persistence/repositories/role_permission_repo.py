"""RolePermission repository: role-permission links (single entity responsibility)."""

from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.domain.exceptions import DuplicateKeyException
from helpdesk.infrastructure.persistence.models.permission import RolePermission


class RolePermissionRepository:
    """Role-permission link table only. Add, replace and query links for a role."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add(self, role_id: str, permission_id: str) -> RolePermission:
        """Link a permission to a role.

        Raises:
            DuplicateKeyException: If the pair already exists.
        """
        rp = RolePermission(role_id=role_id, permission_id=permission_id)
        try:
            self.db.add(rp)
            await self.db.flush()
        except IntegrityError:
            raise DuplicateKeyException(
                "role_permission",
                details_extra={"role_id": role_id, "permission_id": permission_id},
            ) from None
        return rp

    async def delete_for_role(self, role_id: str) -> int:
        """Remove every link of a role; return the number removed."""
        result = await self.db.execute(
            delete(RolePermission).where(RolePermission.role_id == role_id)
        )
        return result.rowcount or 0

    async def count_for_role(self, role_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(RolePermission).where(
                RolePermission.role_id == role_id
            )
        )
        return int(result.scalar_one())
