"""Integration tests for TicketLifecycleService."""

from collections.abc import Iterator
from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from helpdesk.application.dtos.user import UserResult
from helpdesk.composition import Services, build_services
from helpdesk.core.config import Settings
from helpdesk.domain.exceptions import (
    AuthorizationException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from helpdesk.infrastructure.persistence.repositories import NotificationRepository
from tests.factories import StepClock, fake_hash, fake_verify, ticket_data


def _services_with_references(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    references: Iterator[str],
) -> Services:
    def next_reference(now: datetime) -> str:
        return next(references)

    return build_services(
        session_factory,
        settings=settings,
        clock=StepClock(),
        hash_password=fake_hash,
        verify_password=fake_verify,
        reference_generator=next_reference,
    )


async def test_create_ticket_defaults(services: Services) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    assert ticket.status == "Pendiente"
    assert ticket.assigned_to is None
    assert ticket.reference.startswith("T-")
    assert len(ticket.edit_token) >= 32
    assert ticket.anydesk_code is None
    assert ticket.created_at == ticket.updated_at


async def test_create_ticket_invalid_input_persists_nothing(services: Services) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await services.tickets.create_ticket(ticket_data(priority="Urgente", subject="x"))
    assert set(exc_info.value.details["errors"]) == {"priority", "subject"}
    page = await services.ticket_queries.list_tickets()
    assert page.pagination.total == 0


async def test_create_ticket_retries_reference_collision(
    session_factory: async_sessionmaker[AsyncSession], seeded: None, settings: Settings
) -> None:
    services = _services_with_references(
        session_factory, settings, iter(["T-250310-DUP00001", "T-250310-DUP00001", "T-250310-NEW00002"])
    )
    first = await services.tickets.create_ticket(ticket_data())
    second = await services.tickets.create_ticket(ticket_data(subject="Otro problema"))
    assert first.reference == "T-250310-DUP00001"
    assert second.reference == "T-250310-NEW00002"
    assert (await services.ticket_queries.list_tickets()).pagination.total == 2


async def test_create_ticket_gives_up_after_max_attempts(
    session_factory: async_sessionmaker[AsyncSession], seeded: None, settings: Settings
) -> None:
    services = _services_with_references(
        session_factory, settings, iter(["T-250310-DUP00001"] * 10)
    )
    await services.tickets.create_ticket(ticket_data())
    with pytest.raises(ConflictException) as exc_info:
        await services.tickets.create_ticket(ticket_data())
    assert exc_info.value.details["attempts"] == settings.ticket_reference_max_attempts
    assert (await services.ticket_queries.list_tickets()).pagination.total == 1


async def test_update_by_edit_token(services: Services) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    updated = await services.tickets.update_by_edit_token(
        ticket.edit_token,
        {"subject": "Impresora sin tóner", "has_anydesk": True, "anydesk_code": "123 456 789"},
    )
    assert updated.subject == "Impresora sin tóner"
    assert updated.anydesk_code == "123 456 789"
    assert updated.updated_at > ticket.updated_at
    assert updated.reference == ticket.reference

    cleared = await services.tickets.update_by_edit_token(
        ticket.edit_token, {"has_anydesk": False}
    )
    assert cleared.anydesk_code is None

    with_image = await services.tickets.update_by_edit_token(
        ticket.edit_token, {"image_path": "uploads/captura-error.png"}
    )
    assert with_image.image_path == "uploads/captura-error.png"
    assert with_image.subject == "Impresora sin tóner"

    without_image = await services.tickets.update_by_edit_token(
        ticket.edit_token, {"image_path": "  "}
    )
    assert without_image.image_path is None


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("status", "Cerrado"),
        ("assigned_to", "someone"),
        ("edit_token", "new-token"),
        ("reference", "T-000000-HACKED00"),
    ],
)
async def test_update_by_edit_token_rejects_protected_fields(
    services: Services, field: str, value: str
) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    with pytest.raises(ValidationException) as exc_info:
        await services.tickets.update_by_edit_token(
            ticket.edit_token, {"subject": "Cambio de asunto", field: value}
        )
    assert exc_info.value.details["field"] == field
    stored = await services.ticket_queries.get_by_reference(ticket.reference)
    assert stored.subject == ticket.subject
    assert stored.status == "Pendiente"


async def test_update_by_edit_token_requires_anydesk_code(services: Services) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    with pytest.raises(ValidationException) as exc_info:
        await services.tickets.update_by_edit_token(ticket.edit_token, {"has_anydesk": True})
    assert exc_info.value.details["field"] == "anydesk_code"


async def test_update_by_unknown_token(services: Services) -> None:
    with pytest.raises(ResourceNotFoundException):
        await services.tickets.update_by_edit_token("missing-token", {"subject": "Nuevo asunto"})


async def test_change_status_any_to_any(services: Services, tecnico: UserResult) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    closed = await services.tickets.change_status(ticket.id, "Cerrado", actor_id=tecnico.id)
    assert closed.status == "Cerrado"
    reopened = await services.tickets.change_status(ticket.id, "Pendiente", actor_id=tecnico.id)
    assert reopened.status == "Pendiente"


async def test_change_status_invalid_leaves_ticket_unchanged(services: Services) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    with pytest.raises(ValidationException) as exc_info:
        await services.tickets.change_status(ticket.id, "InvalidStatus")
    assert exc_info.value.details["field"] == "status"
    stored = await services.ticket_queries.get_by_reference(ticket.reference)
    assert stored.status == "Pendiente"


async def test_change_status_unknown_ticket(services: Services) -> None:
    with pytest.raises(ResourceNotFoundException):
        await services.tickets.change_status("missing", "Cerrado")


async def test_change_status_requires_permission(services: Services) -> None:
    role_id = await services.roles.create_role({"name": "lector", "display_name": "Lector"})
    reader = await services.users.create_user(
        {"username": "lector1", "password": "secret123", "role_id": role_id}
    )
    ticket = await services.tickets.create_ticket(ticket_data())
    with pytest.raises(AuthorizationException):
        await services.tickets.change_status(ticket.id, "Cerrado", actor_id=reader.id)


async def test_assign_and_unassign(
    services: Services, supervisor: UserResult, tecnico: UserResult
) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    assigned = await services.tickets.assign(ticket.id, tecnico.id, actor_id=supervisor.id)
    assert assigned.assigned_to == tecnico.id
    assert await services.notifications.count_unread(tecnico.id) == 1

    cleared = await services.tickets.assign(ticket.id, None, actor_id=supervisor.id)
    assert cleared.assigned_to is None
    assert await services.notifications.count_unread(tecnico.id) == 1


async def test_assign_unknown_technician(services: Services) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    with pytest.raises(ValidationException) as exc_info:
        await services.tickets.assign(ticket.id, "missing-user")
    assert exc_info.value.details["field"] == "assigned_to"
    stored = await services.ticket_queries.get_by_reference(ticket.reference)
    assert stored.assigned_to is None


async def test_tecnico_cannot_assign(services: Services, tecnico: UserResult) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    with pytest.raises(AuthorizationException):
        await services.tickets.assign(ticket.id, tecnico.id, actor_id=tecnico.id)


async def test_public_and_internal_comments(
    services: Services, tecnico: UserResult
) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    await services.tickets.add_comment(
        ticket.id, {"content": "¿Ya probaron reiniciar?", "author_name": "Ana Pérez"}
    )
    internal = await services.tickets.add_comment(
        ticket.id,
        {"content": "Falta el repuesto", "is_internal": True},
        tecnico.id,
        actor_id=tecnico.id,
    )
    assert internal.author_name == "tecnico_user"
    assert internal.user_id == tecnico.id

    public = await services.ticket_queries.get_with_comments(ticket.reference)
    assert [c.content for c in public.comments] == ["¿Ya probaron reiniciar?"]
    staff = await services.ticket_queries.get_with_comments(
        ticket.reference, include_internal=True
    )
    assert [c.content for c in staff.comments] == [
        "¿Ya probaron reiniciar?",
        "Falta el repuesto",
    ]


async def test_anonymous_internal_comment_is_forbidden(services: Services) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    with pytest.raises(AuthorizationException):
        await services.tickets.add_comment(
            ticket.id, {"content": "Nota", "author_name": "Ana Pérez", "is_internal": True}
        )


async def test_anonymous_comment_requires_author_name(services: Services) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    with pytest.raises(ValidationException) as exc_info:
        await services.tickets.add_comment(ticket.id, {"content": "Hola"})
    assert exc_info.value.details["field"] == "author_name"


async def test_comment_on_unknown_ticket(services: Services) -> None:
    with pytest.raises(ResourceNotFoundException):
        await services.tickets.add_comment(
            "missing", {"content": "Hola", "author_name": "Ana Pérez"}
        )


@pytest.mark.parametrize(
    "error",
    [ConnectionError("notifications table unavailable"), KeyError("recipient")],
    ids=["connection_error", "key_error"],
)
async def test_notification_failure_does_not_fail_the_mutation(
    services: Services,
    admin: UserResult,
    tecnico: UserResult,
    monkeypatch: pytest.MonkeyPatch,
    error: Exception,
) -> None:
    async def broken_create(self, *args, **kwargs):
        raise error

    monkeypatch.setattr(NotificationRepository, "create_notification", broken_create)

    ticket = await services.tickets.create_ticket(
        ticket_data(priority="Crítica – Bloquea mi trabajo")
    )
    assigned = await services.tickets.assign(ticket.id, tecnico.id)
    closed = await services.tickets.change_status(ticket.id, "Cerrado")
    assert assigned.assigned_to == tecnico.id
    assert closed.status == "Cerrado"
    comment = await services.tickets.add_comment(
        ticket.id, {"content": "Sigue sin funcionar", "author_name": "Ana Pérez"}
    )
    assert comment.ticket_id == ticket.id

    stored = await services.ticket_queries.get_by_reference(ticket.reference)
    assert stored.id == ticket.id
    assert stored.status == "Cerrado"
    assert (await services.ticket_queries.list_tickets()).pagination.total == 1

    monkeypatch.undo()
    assert await services.notifications.count_unread(admin.id) == 0
    assert await services.notifications.count_unread(tecnico.id) == 0
