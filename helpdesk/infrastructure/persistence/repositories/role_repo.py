"""Role repository. Read methods return RoleResult (DTO); entity getters return ORM for writes."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.application.dtos.role import RoleResult, RoleUserCount
from helpdesk.domain.exceptions import DuplicateKeyException
from helpdesk.infrastructure.persistence.models.role import Role
from helpdesk.infrastructure.persistence.models.user import User
from helpdesk.infrastructure.persistence.repositories.base import BaseRepository
from helpdesk.shared.utils.datetime import ensure_utc


def _role_to_result(r: Role) -> RoleResult:
    """Map ORM Role to application RoleResult."""
    return RoleResult(
        id=r.id,
        name=r.name,
        display_name=r.display_name,
        description=r.description,
        is_system=r.is_system,
        created_at=ensure_utc(r.created_at),
    )


class RoleRepository(BaseRepository[Role]):
    """Role repository. Use get_by_id / get_for_update for update and delete."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Role)

    async def create_role(
        self,
        name: str,
        display_name: str,
        description: str | None = None,
        *,
        is_system: bool = False,
    ) -> RoleResult:
        """Create a role; return read-model DTO.

        Raises:
            DuplicateKeyException: If a role with this name already exists.
        """
        role = Role(
            name=name,
            display_name=display_name,
            description=description,
            is_system=is_system,
        )
        try:
            created = await self.create(role)
        except IntegrityError:
            raise DuplicateKeyException(
                "role", details_extra={"name": name}
            ) from None
        return _role_to_result(created)

    async def get_result_by_id(self, role_id: str) -> RoleResult | None:
        orm = await self.get_by_id(role_id)
        return _role_to_result(orm) if orm else None

    async def get_by_name(self, name: str) -> RoleResult | None:
        result = await self.db.execute(select(Role).where(Role.name == name))
        row = result.scalar_one_or_none()
        return _role_to_result(row) if row else None

    async def list_roles(self) -> list[RoleResult]:
        """System roles first, then by name."""
        result = await self.db.execute(
            select(Role).order_by(Role.is_system.desc(), Role.name)
        )
        return [_role_to_result(r) for r in result.scalars().all()]

    async def list_with_user_count(self) -> list[RoleUserCount]:
        """Every role with the number of users holding it (zero included)."""
        user_count = func.count(User.id).label("user_count")
        result = await self.db.execute(
            select(Role, user_count)
            .outerjoin(User, User.role_id == Role.id)
            .group_by(Role.id)
            .order_by(Role.is_system.desc(), Role.name)
        )
        return [
            RoleUserCount(
                id=role.id,
                name=role.name,
                display_name=role.display_name,
                user_count=int(count),
                is_system=role.is_system,
                description=role.description,
            )
            for role, count in result.all()
        ]

    async def update_details(
        self, role: Role, display_name: str, description: str | None
    ) -> RoleResult:
        """Update display_name and description. The name is never changed here."""
        role.display_name = display_name
        role.description = description
        updated = await self.save(role)
        return _role_to_result(updated)
