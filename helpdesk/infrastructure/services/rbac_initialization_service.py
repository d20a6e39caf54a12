"""RBAC bootstrap: seeds the permission catalog, the system roles and their grants.

Idempotent: rows that already exist are left untouched, so re-running
inserts nothing and never reverts grants an administrator changed.
The caller owns the transaction (flush only, no commit).
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.application.interfaces.services import PasswordHasher
from helpdesk.application.services.permission_catalog import (
    SYSTEM_PERMISSIONS,
    SYSTEM_ROLES,
)
from helpdesk.domain.enums import SystemRole
from helpdesk.domain.exceptions import ResourceNotFoundException
from helpdesk.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
)
from helpdesk.infrastructure.persistence.models.role import Role
from helpdesk.infrastructure.persistence.models.user import User
from helpdesk.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class InitializationReport:
    """Rows inserted by one initialize() run (all zero on a re-run)."""

    permissions_created: int = 0
    roles_created: int = 0
    links_created: int = 0
    admin_created: bool = False


class RbacInitializationService:
    """Creates default permissions, system roles and role-permission links."""

    def __init__(self, db: AsyncSession, hash_password: PasswordHasher | None = None) -> None:
        self.db = db
        self._hash_password = hash_password

    async def initialize(
        self,
        admin_username: str | None = None,
        admin_password: str | None = None,
    ) -> InitializationReport:
        """Seed the catalog; create the admin user when credentials are given and it is missing."""
        report = InitializationReport()
        permission_map = await self._ensure_permissions(report)
        role_map = await self._ensure_roles(report)
        await self._ensure_links(role_map, permission_map, report)
        if admin_username and admin_password:
            report.admin_created = await self.ensure_admin_user(
                admin_username, admin_password
            )
        logger.info(
            "RBAC seed: %d permissions, %d roles, %d links created (admin created: %s)",
            report.permissions_created,
            report.roles_created,
            report.links_created,
            report.admin_created,
        )
        return report

    async def _ensure_permissions(self, report: InitializationReport) -> dict[str, str]:
        """Return permission name -> id, inserting catalog entries that are missing."""
        result = await self.db.execute(select(Permission.name, Permission.id))
        permission_map = {name: pid for name, pid in result.all()}
        for data in SYSTEM_PERMISSIONS:
            if data["name"] in permission_map:
                continue
            permission = Permission(
                name=data["name"],
                display_name=data["display_name"],
                description=data["description"],
                category=data["category"],
            )
            self.db.add(permission)
            await self.db.flush()
            permission_map[permission.name] = permission.id
            report.permissions_created += 1
        return permission_map

    async def _ensure_roles(self, report: InitializationReport) -> dict[str, str]:
        result = await self.db.execute(
            select(Role.name, Role.id).where(Role.name.in_(list(SYSTEM_ROLES)))
        )
        role_map = {name: rid for name, rid in result.all()}
        for name, data in SYSTEM_ROLES.items():
            if name in role_map:
                continue
            role = Role(
                name=name,
                display_name=data["display_name"],
                description=data["description"],
                is_system=True,
            )
            self.db.add(role)
            await self.db.flush()
            role_map[name] = role.id
            report.roles_created += 1
        return role_map

    async def _ensure_links(
        self,
        role_map: dict[str, str],
        permission_map: dict[str, str],
        report: InitializationReport,
    ) -> None:
        result = await self.db.execute(
            select(RolePermission.role_id, RolePermission.permission_id).where(
                RolePermission.role_id.in_(list(role_map.values()))
            )
        )
        existing = set(result.all())
        for role_name, data in SYSTEM_ROLES.items():
            role_id = role_map[role_name]
            for permission_name in data["permissions"]:
                pair = (role_id, permission_map[permission_name])
                if pair in existing:
                    continue
                self.db.add(RolePermission(role_id=pair[0], permission_id=pair[1]))
                existing.add(pair)
                report.links_created += 1
        await self.db.flush()

    async def ensure_admin_user(self, username: str, password: str) -> bool:
        """Create username with the admin role unless a user with that name exists.

        Raises:
            ResourceNotFoundException: If the admin role has not been seeded.
        """
        if self._hash_password is None:
            raise RuntimeError("A password hasher is required to create the admin user")
        existing = await self.db.execute(select(User.id).where(User.username == username))
        if existing.first() is not None:
            return False
        role_result = await self.db.execute(
            select(Role.id).where(Role.name == SystemRole.ADMIN.value)
        )
        admin_role_id = role_result.scalar_one_or_none()
        if admin_role_id is None:
            raise ResourceNotFoundException("Rol", SystemRole.ADMIN.value)
        self.db.add(
            User(
                username=username,
                password_hash=self._hash_password(password),
                role_id=admin_role_id,
            )
        )
        await self.db.flush()
        logger.info("Default admin user created: %s", username)
        return True
