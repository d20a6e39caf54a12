"""Unit tests for RbacInitializationService (admin bootstrap edge cases)."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from helpdesk.domain.exceptions import ResourceNotFoundException
from helpdesk.infrastructure.services.rbac_initialization_service import (
    RbacInitializationService,
)


def _result(first=None, scalar=None) -> MagicMock:
    result = MagicMock()
    result.first.return_value = first
    result.scalar_one_or_none.return_value = scalar
    return result


async def test_ensure_admin_user_raises_when_admin_role_missing() -> None:
    """ensure_admin_user raises ResourceNotFoundException when the admin role is not seeded."""
    mock_db = AsyncMock()
    mock_db.add = MagicMock()
    mock_db.execute = AsyncMock(side_effect=[_result(first=None), _result(scalar=None)])

    svc = RbacInitializationService(mock_db, lambda password: f"hashed::{password}")
    with pytest.raises(ResourceNotFoundException) as exc_info:
        await svc.ensure_admin_user("root", "changeme1")

    assert exc_info.value.error_code == "RESOURCE_NOT_FOUND"
    assert exc_info.value.details["resource_id"] == "admin"
    mock_db.add.assert_not_called()


async def test_ensure_admin_user_skips_existing_username() -> None:
    mock_db = AsyncMock()
    mock_db.add = MagicMock()
    mock_db.execute = AsyncMock(return_value=_result(first=("user-1",)))

    svc = RbacInitializationService(mock_db, lambda password: f"hashed::{password}")
    assert await svc.ensure_admin_user("root", "changeme1") is False
    assert mock_db.execute.await_count == 1
    mock_db.add.assert_not_called()


async def test_ensure_admin_user_hashes_password() -> None:
    mock_db = AsyncMock()
    mock_db.add = MagicMock()
    mock_db.execute = AsyncMock(
        side_effect=[_result(first=None), _result(scalar="role-admin")]
    )

    svc = RbacInitializationService(mock_db, lambda password: f"hashed::{password}")
    assert await svc.ensure_admin_user("root", "changeme1") is True
    user = mock_db.add.call_args.args[0]
    assert user.username == "root"
    assert user.role_id == "role-admin"
    assert user.password_hash == "hashed::changeme1"
    mock_db.flush.assert_awaited_once()
