"""User application service: login, staff accounts and role changes.

Password hashing runs in a worker thread (bcrypt is CPU bound).
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from helpdesk.application.dtos.user import UserResult
from helpdesk.application.interfaces.repositories import ITransactionCoordinator
from helpdesk.application.interfaces.services import (
    IAuthorizationService,
    PasswordHasher,
    PasswordRehashCheck,
    PasswordVerifier,
)
from helpdesk.application.services.best_effort import BestEffortPolicy
from helpdesk.application.services.permission_catalog import MANAGE_USERS
from helpdesk.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    DuplicateKeyException,
    ResourceNotFoundException,
    ValidationException,
)
from helpdesk.schemas.user import (
    LoginRequest,
    PasswordChangeRequest,
    UserCreateRequest,
    UsernameUpdateRequest,
)
from helpdesk.schemas.validation import validate_payload
from helpdesk.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_USERNAME_TAKEN = "El nombre de usuario ya existe"
_ROLE_NOT_FOUND = "El rol seleccionado no existe"


class UserService:
    """Staff account administration. Mutations accept actor_id to require manage_users."""

    def __init__(
        self,
        coordinator: ITransactionCoordinator,
        hash_password: PasswordHasher,
        verify_password: PasswordVerifier,
        authorization: IAuthorizationService | None = None,
        needs_rehash: PasswordRehashCheck | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._hash_password = hash_password
        self._verify_password = verify_password
        self._authorization = authorization
        self._needs_rehash = needs_rehash
        self._rehash_policy = BestEffortPolicy("password rehash")
        self._dummy_hash: str | None = None

    async def _authorize(self, actor_id: str | None) -> None:
        if actor_id is None:
            return
        if self._authorization is None:
            raise RuntimeError("UserService needs an authorization service to check actors")
        await self._authorization.require_permission(actor_id, MANAGE_USERS, "user")

    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash_password, password)

    async def _verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self._verify_password, password, password_hash)

    async def authenticate(self, username: str, password: str) -> UserResult:
        """Return the user for valid credentials.

        Unknown user and wrong password raise the same AuthenticationException;
        an unknown user still pays for one hash comparison.
        A hash stored with an outdated bcrypt cost is replaced after a
        successful login; failing to replace it does not fail the login.
        """
        try:
            login = validate_payload(
                LoginRequest, {"username": username, "password": password}
            )
        except ValidationException:
            raise AuthenticationException() from None
        async with self._coordinator.read() as repos:
            credentials = await repos.users.get_credentials(login.username)
            user = (
                await repos.users.get_result_by_id(credentials.id) if credentials else None
            )
        if credentials is None or user is None:
            if self._dummy_hash is None:
                self._dummy_hash = await self._hash("not-a-real-password")
            await self._verify(login.password, self._dummy_hash)
            logger.info("Failed login for unknown user")
            raise AuthenticationException()
        if not await self._verify(login.password, credentials.password_hash):
            logger.info("Failed login for user %s", credentials.id)
            raise AuthenticationException()
        if self._needs_rehash is not None and self._needs_rehash(credentials.password_hash):
            await self._rehash_policy.run(
                self._upgrade_hash(credentials.id, login.password),
                f"user {credentials.id}",
            )
        return user

    async def _upgrade_hash(self, user_id: str, password: str) -> None:
        new_hash = await self._hash(password)
        async with self._coordinator.transaction() as repos:
            user = await repos.users.get_for_update(user_id)
            if user is not None:
                await repos.users.set_password_hash(user, new_hash)
        logger.info("Password hash upgraded for user %s", user_id)

    async def create_user(
        self,
        data: Mapping[str, Any] | UserCreateRequest,
        *,
        actor_id: str | None = None,
    ) -> UserResult:
        """Create a staff account.

        Raises:
            ValidationException: Invalid input, taken username (field "username")
                or unknown role (field "role_id").
        """
        await self._authorize(actor_id)
        payload = validate_payload(UserCreateRequest, data)
        password_hash = await self._hash(payload.password)
        try:
            async with self._coordinator.transaction() as repos:
                if await repos.users.get_by_username(payload.username):
                    raise ValidationException(_USERNAME_TAKEN, field="username")
                if await repos.roles.get_for_update(payload.role_id) is None:
                    raise ValidationException(_ROLE_NOT_FOUND, field="role_id")
                user = await repos.users.create_user(
                    payload.username, password_hash, payload.role_id
                )
        except DuplicateKeyException:
            raise ValidationException(_USERNAME_TAKEN, field="username") from None
        logger.info("User created: %s (%s)", user.username, user.id)
        return user

    async def change_user_role(
        self,
        user_id: str,
        new_role_id: str,
        acting_user_id: str,
        *,
        check_permission: bool = True,
    ) -> UserResult:
        """Give a user a different role. Nobody may change their own role.

        The role is re-checked inside the transaction, so a role deleted after
        the caller looked it up is rejected instead of leaving a dangling link.

        Raises:
            AuthorizationException: acting user lacks manage_users, or targets self.
            ValidationException: Unknown role.
            ResourceNotFoundException: Unknown user.
        """
        if user_id == acting_user_id:
            raise AuthorizationException(
                resource="user", message="No puedes cambiar tu propio rol"
            )
        if check_permission:
            await self._authorize(acting_user_id)
        async with self._coordinator.transaction() as repos:
            user = await repos.users.get_for_update(user_id)
            if user is None:
                raise ResourceNotFoundException("Usuario", user_id)
            role = await repos.roles.get_for_update(new_role_id)
            if role is None:
                raise ValidationException(_ROLE_NOT_FOUND, field="role_id")
            updated = await repos.users.set_role(user, role.id)
        logger.info(
            "User %s role changed to %s by %s", user_id, updated.role_name, acting_user_id
        )
        return updated

    async def delete_user(
        self, user_id: str, acting_user_id: str, *, check_permission: bool = True
    ) -> None:
        """Delete a staff account. Nobody may delete their own account.

        Raises:
            AuthorizationException: acting user lacks manage_users, or targets self.
            ResourceNotFoundException: Unknown user.
        """
        if user_id == acting_user_id:
            raise AuthorizationException(
                resource="user", message="No puedes eliminar tu propia cuenta"
            )
        if check_permission:
            await self._authorize(acting_user_id)
        async with self._coordinator.transaction() as repos:
            user = await repos.users.get_for_update(user_id)
            if user is None:
                raise ResourceNotFoundException("Usuario", user_id)
            await repos.users.delete(user)
        logger.info("User %s deleted by %s", user_id, acting_user_id)

    async def change_password(
        self, user_id: str, data: Mapping[str, Any] | PasswordChangeRequest
    ) -> None:
        """Change the caller's own password after checking the current one.

        Raises:
            ValidationException: Mismatch or wrong current password (field "current_password").
            ResourceNotFoundException: Unknown user.
        """
        payload = validate_payload(PasswordChangeRequest, data)
        async with self._coordinator.read() as repos:
            user = await repos.users.get_by_id(user_id)
            current_hash = user.password_hash if user else None
        if current_hash is None:
            raise ResourceNotFoundException("Usuario", user_id)
        if not await self._verify(payload.current_password, current_hash):
            raise ValidationException(
                "La contraseña actual es incorrecta", field="current_password"
            )
        new_hash = await self._hash(payload.new_password)
        async with self._coordinator.transaction() as repos:
            user = await repos.users.get_for_update(user_id)
            if user is None:
                raise ResourceNotFoundException("Usuario", user_id)
            await repos.users.set_password_hash(user, new_hash)
        logger.info("Password changed for user %s", user_id)

    async def update_username(
        self, user_id: str, data: Mapping[str, Any] | UsernameUpdateRequest
    ) -> UserResult:
        payload = validate_payload(UsernameUpdateRequest, data)
        try:
            async with self._coordinator.transaction() as repos:
                user = await repos.users.get_for_update(user_id)
                if user is None:
                    raise ResourceNotFoundException("Usuario", user_id)
                existing = await repos.users.get_by_username(payload.username)
                if existing and existing.id != user_id:
                    raise ValidationException(_USERNAME_TAKEN, field="username")
                updated = await repos.users.set_username(user, payload.username)
        except DuplicateKeyException:
            raise ValidationException(_USERNAME_TAKEN, field="username") from None
        return updated

    async def get_user(self, user_id: str) -> UserResult:
        async with self._coordinator.read() as repos:
            user = await repos.users.get_result_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("Usuario", user_id)
        return user

    async def list_users(self) -> list[UserResult]:
        async with self._coordinator.read() as repos:
            return await repos.users.list_users()
