"""Role application service: custom roles and their permission sets.

Each mutation runs in one transaction. When actor_id is given, the actor
must hold manage_roles; the check runs before the transaction opens.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from helpdesk.application.dtos.permission import PermissionCategoryGroup
from helpdesk.application.dtos.role import RoleResult, RoleUserCount, RoleWithPermissions
from helpdesk.application.interfaces.repositories import ITransactionCoordinator
from helpdesk.application.interfaces.services import IAuthorizationService
from helpdesk.application.services.permission_catalog import (
    MANAGE_ROLES,
    group_by_category,
)
from helpdesk.domain.exceptions import (
    AuthorizationException,
    ConflictException,
    DuplicateKeyException,
    ResourceNotFoundException,
    ValidationException,
)
from helpdesk.schemas.role import RoleCreateRequest, RoleUpdateRequest
from helpdesk.schemas.validation import validate_payload
from helpdesk.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_DUPLICATE_NAME = "Ya existe un rol con ese nombre"


class RoleService:
    """Create, update and delete roles; assign permissions in the same transaction."""

    def __init__(
        self,
        coordinator: ITransactionCoordinator,
        authorization: IAuthorizationService | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._authorization = authorization

    async def _authorize(self, actor_id: str | None) -> None:
        if actor_id is None:
            return
        if self._authorization is None:
            raise RuntimeError("RoleService needs an authorization service to check actors")
        await self._authorization.require_permission(actor_id, MANAGE_ROLES, "role")

    async def create_role(
        self,
        data: Mapping[str, Any] | RoleCreateRequest,
        *,
        actor_id: str | None = None,
    ) -> str:
        """Create a custom role and link the known permission ids; return the role id.

        Raises:
            ValidationException: Invalid or duplicate name (field "name").
            AuthorizationException: actor_id lacks manage_roles.
        """
        await self._authorize(actor_id)
        payload = validate_payload(RoleCreateRequest, data)
        try:
            async with self._coordinator.transaction() as repos:
                if await repos.roles.get_by_name(payload.name):
                    raise ValidationException(_DUPLICATE_NAME, field="name")
                role = await repos.roles.create_role(
                    name=payload.name,
                    display_name=payload.display_name,
                    description=payload.description,
                )
                permission_ids = await repos.permissions.filter_existing_ids(
                    payload.permission_ids
                )
                for permission_id in permission_ids:
                    await repos.role_permissions.add(role.id, permission_id)
        except DuplicateKeyException as exc:
            if exc.details.get("entity") != "role":
                raise
            raise ValidationException(_DUPLICATE_NAME, field="name") from None
        logger.info(
            "Role created: %s (%s) with %d permissions",
            payload.name,
            role.id,
            len(permission_ids),
        )
        return role.id

    async def update_role(
        self,
        role_id: str,
        data: Mapping[str, Any] | RoleUpdateRequest,
        *,
        actor_id: str | None = None,
    ) -> RoleResult:
        """Update display name/description and replace the permission set atomically.

        The role name is never changed. System roles may be edited.

        Raises:
            ResourceNotFoundException: Unknown role.
        """
        await self._authorize(actor_id)
        payload = validate_payload(RoleUpdateRequest, data)
        async with self._coordinator.transaction() as repos:
            role = await repos.roles.get_for_update(role_id)
            if role is None:
                raise ResourceNotFoundException("Rol", role_id)
            updated = await repos.roles.update_details(
                role, payload.display_name, payload.description
            )
            await repos.role_permissions.delete_for_role(role_id)
            permission_ids = await repos.permissions.filter_existing_ids(
                payload.permission_ids
            )
            for permission_id in permission_ids:
                await repos.role_permissions.add(role_id, permission_id)
        logger.info("Role updated: %s (%d permissions)", role_id, len(permission_ids))
        return updated

    async def delete_role(self, role_id: str, *, actor_id: str | None = None) -> None:
        """Delete a custom role with no users.

        The role row is locked before the user count is read, so a concurrent
        role change cannot slip a user in between check and delete.

        Raises:
            ResourceNotFoundException: Unknown role.
            AuthorizationException: System role.
            ConflictException: Users still hold the role.
        """
        await self._authorize(actor_id)
        async with self._coordinator.transaction() as repos:
            role = await repos.roles.get_for_update(role_id)
            if role is None:
                raise ResourceNotFoundException("Rol", role_id)
            if role.is_system:
                raise AuthorizationException(
                    resource="role",
                    message="No se pueden eliminar los roles del sistema",
                )
            user_count = await repos.users.count_by_role(role_id)
            if user_count > 0:
                raise ConflictException(
                    f"No se puede eliminar el rol porque tiene {user_count} usuario(s) asignado(s)",
                    details={"role_id": role_id, "user_count": user_count},
                )
            await repos.role_permissions.delete_for_role(role_id)
            await repos.roles.delete(role)
        logger.info("Role deleted: %s", role_id)

    async def count_users_by_role(self) -> list[RoleUserCount]:
        async with self._coordinator.read() as repos:
            return await repos.roles.list_with_user_count()

    async def list_roles_with_user_count(self) -> list[RoleUserCount]:
        """Roles for the admin listing: system roles first, with user counts."""
        return await self.count_users_by_role()

    async def get_role_by_id(self, role_id: str) -> RoleWithPermissions:
        """Role with its permissions.

        Raises:
            ResourceNotFoundException: Unknown role.
        """
        async with self._coordinator.read() as repos:
            role = await repos.roles.get_result_by_id(role_id)
            if role is None:
                raise ResourceNotFoundException("Rol", role_id)
            permissions = await repos.permissions.list_for_role(role_id)
        return RoleWithPermissions(role=role, permissions=permissions)

    async def list_permissions_by_category(self) -> list[PermissionCategoryGroup]:
        async with self._coordinator.read() as repos:
            permissions = await repos.permissions.list_all()
        return group_by_category(permissions)
