"""User repository. Interface methods return application DTOs; hashes stay internal."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.application.dtos.user import UserCredentials, UserResult
from helpdesk.domain.exceptions import DuplicateKeyException
from helpdesk.infrastructure.persistence.models.role import Role
from helpdesk.infrastructure.persistence.models.user import User
from helpdesk.infrastructure.persistence.repositories.base import BaseRepository
from helpdesk.shared.utils.datetime import ensure_utc


def _user_to_result(u: User, role: Role | None = None) -> UserResult:
    """Map ORM User (and its role when joined) to UserResult (no password)."""
    return UserResult(
        id=u.id,
        username=u.username,
        role_id=u.role_id,
        role_name=role.name if role else None,
        role_display_name=role.display_name if role else None,
        created_at=ensure_utc(u.created_at),
    )


class UserRepository(BaseRepository[User]):
    """User repository. Credentials lookup, role queries and account updates."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    def _with_role(self):
        return select(User, Role).join(Role, Role.id == User.role_id)

    async def create_user(
        self, username: str, password_hash: str, role_id: str
    ) -> UserResult:
        """Create a user with an already-hashed password.

        Raises:
            DuplicateKeyException: If the username is taken.
        """
        user = User(username=username, password_hash=password_hash, role_id=role_id)
        try:
            created = await self.create(user)
        except IntegrityError:
            raise DuplicateKeyException(
                "user", details_extra={"username": username}
            ) from None
        return await self.get_result_by_id(created.id) or _user_to_result(created)

    async def get_result_by_id(self, user_id: str) -> UserResult | None:
        result = await self.db.execute(self._with_role().where(User.id == user_id))
        row = result.first()
        return _user_to_result(row[0], row[1]) if row else None

    async def get_by_username(self, username: str) -> UserResult | None:
        result = await self.db.execute(
            self._with_role().where(User.username == username)
        )
        row = result.first()
        return _user_to_result(row[0], row[1]) if row else None

    async def get_credentials(self, username: str) -> UserCredentials | None:
        result = await self.db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None:
            return None
        return UserCredentials(
            id=user.id, username=user.username, password_hash=user.password_hash
        )

    async def exists(self, user_id: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.id == user_id))
        return result.first() is not None

    async def count_by_role(self, role_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(User).where(User.role_id == role_id)
        )
        return int(result.scalar_one())

    async def list_users(self) -> list[UserResult]:
        result = await self.db.execute(self._with_role().order_by(User.username))
        return [_user_to_result(u, r) for u, r in result.all()]

    async def list_by_role_names(self, role_names: Iterable[str]) -> list[UserResult]:
        """Users whose role name is one of role_names, ordered by username."""
        names = list(role_names)
        if not names:
            return []
        result = await self.db.execute(
            self._with_role().where(Role.name.in_(names)).order_by(User.username)
        )
        return [_user_to_result(u, r) for u, r in result.all()]

    async def set_role(self, user: User, role_id: str) -> UserResult:
        user.role_id = role_id
        await self.save(user)
        return await self.get_result_by_id(user.id) or _user_to_result(user)

    async def set_password_hash(self, user: User, password_hash: str) -> None:
        user.password_hash = password_hash
        await self.save(user)

    async def set_username(self, user: User, username: str) -> UserResult:
        """Rename a user.

        Raises:
            DuplicateKeyException: If the username is taken.
        """
        user.username = username
        try:
            await self.save(user)
        except IntegrityError:
            raise DuplicateKeyException(
                "user", details_extra={"username": username}
            ) from None
        return await self.get_result_by_id(user.id) or _user_to_result(user)
