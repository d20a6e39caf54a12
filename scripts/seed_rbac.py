"""Seed RBAC (permission catalog, system roles, grants) and the default admin user.

Usage:
    python -m scripts.seed_rbac
Safe to run repeatedly. The admin user is created only when
DEFAULT_ADMIN_PASSWORD is set and DEFAULT_ADMIN_USERNAME does not exist yet.
"""

import asyncio
import sys
from functools import partial

from helpdesk.core.config import get_settings
from helpdesk.infrastructure.persistence.database import (
    dispose_engine,
    get_session_factory,
)
from helpdesk.infrastructure.security.password import get_password_hash
from helpdesk.infrastructure.services.rbac_initialization_service import (
    RbacInitializationService,
)
from helpdesk.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Seed RBAC in one transaction."""
    setup_logging()
    settings = get_settings()
    try:
        session_factory = get_session_factory()
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)

    admin_password = (
        settings.default_admin_password.get_secret_value()
        if settings.default_admin_password
        else None
    )
    try:
        async with session_factory() as session:
            async with session.begin():
                init_svc = RbacInitializationService(
                    session, partial(get_password_hash, rounds=settings.password_hash_rounds)
                )
                report = await init_svc.initialize(
                    admin_username=settings.default_admin_username,
                    admin_password=admin_password,
                )
    finally:
        await dispose_engine()
    print(
        f"Seeded RBAC: {report.permissions_created} permissions, "
        f"{report.roles_created} roles, {report.links_created} grants"
        + (f", admin user '{settings.default_admin_username}'" if report.admin_created else "")
    )


if __name__ == "__main__":
    asyncio.run(main())
