"""Transaction boundaries for the core.

Every mutating operation runs inside exactly one ``transaction()`` block:
the block commits when it exits normally and rolls back on any exception.
Notification fan-out is never run inside a mutation block; callers open a
separate block per notification row after the mutation has committed.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from helpdesk.infrastructure.persistence.repositories import (
    CommentRepository,
    NotificationRepository,
    PermissionRepository,
    RolePermissionRepository,
    RoleRepository,
    TicketRepository,
    UserRepository,
)


@dataclass(frozen=True)
class Repositories:
    """All repositories bound to one session (one unit of work)."""

    session: AsyncSession
    roles: RoleRepository
    permissions: PermissionRepository
    role_permissions: RolePermissionRepository
    users: UserRepository
    tickets: TicketRepository
    comments: CommentRepository
    notifications: NotificationRepository

    @classmethod
    def from_session(cls, session: AsyncSession) -> Repositories:
        return cls(
            session=session,
            roles=RoleRepository(session),
            permissions=PermissionRepository(session),
            role_permissions=RolePermissionRepository(session),
            users=UserRepository(session),
            tickets=TicketRepository(session),
            comments=CommentRepository(session),
            notifications=NotificationRepository(session),
        )


class TransactionCoordinator:
    """Opens sessions from a session factory and owns commit/rollback."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Repositories]:
        """Yield repositories in one transaction: commit on exit, rollback on error."""
        async with self._session_factory() as session:
            async with session.begin():
                yield Repositories.from_session(session)

    @asynccontextmanager
    async def read(self) -> AsyncIterator[Repositories]:
        """Yield repositories on a session that is never committed."""
        async with self._session_factory() as session:
            try:
                yield Repositories.from_session(session)
            finally:
                await session.rollback()
