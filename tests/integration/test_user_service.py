"""Integration tests for UserService (login, accounts, role changes)."""

import pytest

from helpdesk.application.dtos.user import UserResult
from helpdesk.composition import Services
from helpdesk.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from tests.factories import make_user


async def test_authenticate_returns_user_with_role(
    services: Services, supervisor: UserResult
) -> None:
    user = await services.users.authenticate("supervisor_user", "secret123")
    assert user.id == supervisor.id
    assert user.role_name == "supervisor"


@pytest.mark.parametrize(
    ("username", "password"),
    [("supervisor_user", "wrong-password"), ("nobody", "secret123"), ("", "")],
)
async def test_authenticate_failures_share_one_message(
    services: Services, supervisor: UserResult, username: str, password: str
) -> None:
    with pytest.raises(AuthenticationException) as exc_info:
        await services.users.authenticate(username, password)
    assert exc_info.value.message == "Usuario o contraseña incorrectos"


async def test_create_user_stores_hashed_password(
    services: Services, role_ids: dict[str, str]
) -> None:
    user = await make_user(services, "maria", role_ids["tecnico"])
    assert user.role_name == "tecnico"
    async with services.coordinator.read() as repos:
        credentials = await repos.users.get_credentials("maria")
    assert credentials is not None
    assert credentials.password_hash == "hashed::secret123"


async def test_create_user_duplicate_username(
    services: Services, tecnico: UserResult, role_ids: dict[str, str]
) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await make_user(services, "tecnico_user", role_ids["tecnico"])
    assert exc_info.value.details["field"] == "username"


async def test_create_user_unknown_role(services: Services) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await make_user(services, "maria", "missing-role")
    assert exc_info.value.details["field"] == "role_id"


async def test_create_user_requires_manage_users(
    services: Services, supervisor: UserResult, role_ids: dict[str, str]
) -> None:
    with pytest.raises(AuthorizationException):
        await services.users.create_user(
            {"username": "maria", "password": "secret123", "role_id": role_ids["tecnico"]},
            actor_id=supervisor.id,
        )


async def test_change_user_role(
    services: Services, admin: UserResult, tecnico: UserResult, role_ids: dict[str, str]
) -> None:
    updated = await services.users.change_user_role(
        tecnico.id, role_ids["supervisor"], admin.id
    )
    assert updated.role_id == role_ids["supervisor"]
    assert updated.role_name == "supervisor"


async def test_change_own_role_is_forbidden(
    services: Services, admin: UserResult, role_ids: dict[str, str]
) -> None:
    with pytest.raises(AuthorizationException) as exc_info:
        await services.users.change_user_role(admin.id, role_ids["tecnico"], admin.id)
    assert exc_info.value.message == "No puedes cambiar tu propio rol"


async def test_change_user_role_requires_manage_users(
    services: Services, supervisor: UserResult, tecnico: UserResult, role_ids: dict[str, str]
) -> None:
    with pytest.raises(AuthorizationException):
        await services.users.change_user_role(
            tecnico.id, role_ids["supervisor"], supervisor.id
        )
    assert (await services.users.get_user(tecnico.id)).role_name == "tecnico"


async def test_change_user_role_to_deleted_role(
    services: Services, admin: UserResult, tecnico: UserResult
) -> None:
    role_id = await services.roles.create_role({"name": "auditor", "display_name": "Auditor"})
    await services.roles.delete_role(role_id)
    with pytest.raises(ValidationException) as exc_info:
        await services.users.change_user_role(tecnico.id, role_id, admin.id)
    assert exc_info.value.details["field"] == "role_id"


async def test_change_role_of_unknown_user(
    services: Services, admin: UserResult, role_ids: dict[str, str]
) -> None:
    with pytest.raises(ResourceNotFoundException):
        await services.users.change_user_role("missing", role_ids["tecnico"], admin.id)


async def test_delete_user(services: Services, admin: UserResult, tecnico: UserResult) -> None:
    await services.users.delete_user(tecnico.id, admin.id)
    with pytest.raises(ResourceNotFoundException):
        await services.users.get_user(tecnico.id)


async def test_delete_own_account_is_forbidden(services: Services, admin: UserResult) -> None:
    with pytest.raises(AuthorizationException) as exc_info:
        await services.users.delete_user(admin.id, admin.id)
    assert exc_info.value.message == "No puedes eliminar tu propia cuenta"


async def test_change_password(services: Services, tecnico: UserResult) -> None:
    await services.users.change_password(
        tecnico.id,
        {
            "current_password": "secret123",
            "new_password": "newsecret",
            "confirm_password": "newsecret",
        },
    )
    user = await services.users.authenticate("tecnico_user", "newsecret")
    assert user.id == tecnico.id
    with pytest.raises(AuthenticationException):
        await services.users.authenticate("tecnico_user", "secret123")


async def test_change_password_wrong_current(services: Services, tecnico: UserResult) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await services.users.change_password(
            tecnico.id,
            {
                "current_password": "nope",
                "new_password": "newsecret",
                "confirm_password": "newsecret",
            },
        )
    assert exc_info.value.details["field"] == "current_password"


async def test_update_username(
    services: Services, admin: UserResult, tecnico: UserResult
) -> None:
    renamed = await services.users.update_username(tecnico.id, {"username": "tecnico_dos"})
    assert renamed.username == "tecnico_dos"
    with pytest.raises(ValidationException) as exc_info:
        await services.users.update_username(tecnico.id, {"username": "admin_user"})
    assert exc_info.value.details["field"] == "username"


async def test_list_users_sorted_by_username(
    services: Services, admin: UserResult, supervisor: UserResult, tecnico: UserResult
) -> None:
    users = await services.users.list_users()
    assert [u.username for u in users] == ["admin_user", "supervisor_user", "tecnico_user"]
