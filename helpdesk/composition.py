"""Composition root: builds every service over one session factory.

Callers (scripts, an HTTP layer, tests) use build_services() and never
construct repositories or sessions themselves.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from functools import partial

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from helpdesk.application.interfaces.services import (
    PasswordHasher,
    PasswordRehashCheck,
    PasswordVerifier,
)
from helpdesk.application.services.authorization_service import AuthorizationService
from helpdesk.application.services.notification_dispatcher import NotificationDispatcher
from helpdesk.application.services.role_service import RoleService
from helpdesk.application.services.user_service import UserService
from helpdesk.application.use_cases.tickets import (
    TicketLifecycleService,
    TicketQueryService,
)
from helpdesk.core.config import Settings, get_settings
from helpdesk.infrastructure.persistence.database import get_session_factory
from helpdesk.infrastructure.persistence.transaction import TransactionCoordinator
from helpdesk.infrastructure.security.password import (
    get_password_hash,
    needs_rehash,
    verify_password,
)
from helpdesk.infrastructure.services.permission_resolver import PermissionResolver
from helpdesk.shared.utils.datetime import utc_now
from helpdesk.shared.utils.generators import generate_edit_token


@dataclass(frozen=True)
class Services:
    coordinator: TransactionCoordinator
    authorization: AuthorizationService
    roles: RoleService
    users: UserService
    notifications: NotificationDispatcher
    tickets: TicketLifecycleService
    ticket_queries: TicketQueryService


def build_services(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    *,
    settings: Settings | None = None,
    clock: Callable[[], datetime] = utc_now,
    hash_password: PasswordHasher | None = None,
    verify_password: PasswordVerifier = verify_password,
    reference_generator: Callable[[datetime], str] | None = None,
    token_generator: Callable[[], str] | None = None,
) -> Services:
    """Wire the services. session_factory defaults to the process-wide one from settings.

    Without hash_password, bcrypt is used at PASSWORD_HASH_ROUNDS and older
    hashes are upgraded on login.
    """
    settings = settings or get_settings()
    rehash_check: PasswordRehashCheck | None = None
    if hash_password is None:
        hash_password = partial(get_password_hash, rounds=settings.password_hash_rounds)
        rehash_check = partial(needs_rehash, rounds=settings.password_hash_rounds)
    coordinator = TransactionCoordinator(session_factory or get_session_factory())
    authorization = AuthorizationService(coordinator, PermissionResolver)
    notifications = NotificationDispatcher(
        coordinator,
        clock=clock,
        retention_days=settings.notification_retention_days,
    )
    tickets = TicketLifecycleService(
        coordinator,
        authorization=authorization,
        dispatcher=notifications,
        clock=clock,
        reference_generator=reference_generator,
        reference_prefix=settings.ticket_reference_prefix,
        max_attempts=settings.ticket_reference_max_attempts,
        token_generator=token_generator or generate_edit_token,
    )
    return Services(
        coordinator=coordinator,
        authorization=authorization,
        roles=RoleService(coordinator, authorization),
        users=UserService(
            coordinator,
            hash_password=hash_password,
            verify_password=verify_password,
            authorization=authorization,
            needs_rehash=rehash_check,
        ),
        notifications=notifications,
        tickets=tickets,
        ticket_queries=TicketQueryService(coordinator),
    )
