"""Pytest configuration and fixtures for helpdesk.

Integration fixtures run against an in-memory SQLite database (aiosqlite,
one shared connection via StaticPool) with the schema created from the ORM
metadata and the RBAC catalog seeded. Password hashing is replaced by a
fast reversible fake; tests/unit/test_password.py covers bcrypt itself.
"""

from collections.abc import AsyncIterator

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from helpdesk.application.dtos.user import UserResult
from helpdesk.composition import Services, build_services
from helpdesk.core.config import Settings
from helpdesk.domain.enums import SystemRole
from helpdesk.infrastructure.persistence import models  # noqa: F401  (register tables)
from helpdesk.infrastructure.persistence.database import Base, build_session_factory
from helpdesk.infrastructure.services.rbac_initialization_service import (
    RbacInitializationService,
)
from tests.factories import StepClock, fake_hash, fake_verify, make_user

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
async def seeded(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Seed permissions, system roles and grants."""
    async with session_factory() as session:
        async with session.begin():
            await RbacInitializationService(session, fake_hash).initialize()


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url=TEST_DATABASE_URL)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def services(
    session_factory: async_sessionmaker[AsyncSession],
    seeded: None,
    settings: Settings,
    clock: StepClock,
) -> Services:
    return build_services(
        session_factory,
        settings=settings,
        clock=clock,
        hash_password=fake_hash,
        verify_password=fake_verify,
    )


@pytest.fixture
async def role_ids(services: Services) -> dict[str, str]:
    """System role name -> id."""
    async with services.coordinator.read() as repos:
        roles = await repos.roles.list_roles()
    return {r.name: r.id for r in roles}


@pytest.fixture
async def admin(services: Services, role_ids: dict[str, str]) -> UserResult:
    return await make_user(services, "admin_user", role_ids[SystemRole.ADMIN.value])


@pytest.fixture
async def supervisor(services: Services, role_ids: dict[str, str]) -> UserResult:
    return await make_user(
        services, "supervisor_user", role_ids[SystemRole.SUPERVISOR.value]
    )


@pytest.fixture
async def tecnico(services: Services, role_ids: dict[str, str]) -> UserResult:
    return await make_user(services, "tecnico_user", role_ids[SystemRole.TECNICO.value])
