"""Integration tests for notification fan-out and the per-user inbox."""

from collections import Counter

import pytest

from helpdesk.application.dtos.user import UserResult
from helpdesk.composition import Services
from tests.factories import StepClock, make_user, ticket_data

CRITICAL = "Crítica – Bloquea mi trabajo"


async def _types(services: Services, user_id: str) -> Counter[str]:
    return Counter(n.type for n in await services.notifications.list_all(user_id, limit=100))


async def test_critical_unassigned_ticket_notifies_staff_twice(
    services: Services,
    admin: UserResult,
    supervisor: UserResult,
    tecnico: UserResult,
    role_ids: dict[str, str],
) -> None:
    second_admin = await make_user(services, "admin_dos", role_ids["admin"])
    await services.tickets.create_ticket(ticket_data(priority=CRITICAL))

    for user in (admin, supervisor, second_admin):
        assert await _types(services, user.id) == Counter(
            {"new_ticket": 1, "high_priority": 1}
        )
    assert await _types(services, tecnico.id) == Counter()


@pytest.mark.parametrize(
    "priority",
    [
        "Baja – No es urgente",
        "Media – Puede esperar unas horas",
        "Alta – Necesito ayuda pronto",
    ],
)
async def test_lower_priorities_only_send_new_ticket(
    services: Services, admin: UserResult, priority: str
) -> None:
    await services.tickets.create_ticket(ticket_data(priority=priority))
    assert await _types(services, admin.id) == Counter({"new_ticket": 1})


async def test_new_ticket_message(services: Services, supervisor: UserResult) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    [notification] = await services.notifications.list_unread(supervisor.id)
    assert notification.title == "🎫 Nuevo ticket creado"
    assert notification.message == f"Ticket {ticket.reference} - {ticket.subject}"
    assert notification.ticket_id == ticket.id
    assert notification.ticket_reference == ticket.reference
    assert notification.is_read is False


async def test_status_change_notifies_assignee_only_when_terminal(
    services: Services, admin: UserResult, tecnico: UserResult
) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    await services.tickets.assign(ticket.id, tecnico.id)

    await services.tickets.change_status(ticket.id, "En Proceso")
    assert (await _types(services, tecnico.id))["status_change"] == 0

    await services.tickets.change_status(ticket.id, "Resuelto")
    assert (await _types(services, tecnico.id))["status_change"] == 1
    assert (await _types(services, admin.id))["status_change"] == 0

    await services.tickets.change_status(ticket.id, "Cerrado")
    notifications = await services.notifications.list_all(tecnico.id)
    assert notifications[0].message == f"El ticket {ticket.reference} ahora está: Cerrado"


async def test_status_change_without_assignee_notifies_nobody(
    services: Services, admin: UserResult
) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    await services.tickets.change_status(ticket.id, "Cerrado")
    assert (await _types(services, admin.id))["status_change"] == 0


async def test_new_comment_notifies_assignee(
    services: Services, supervisor: UserResult, tecnico: UserResult
) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    await services.tickets.assign(ticket.id, tecnico.id)

    await services.tickets.add_comment(
        ticket.id, {"content": "Sigue sin funcionar", "author_name": "Ana Pérez"}
    )
    await services.tickets.add_comment(
        ticket.id, {"content": "Revisado el cable"}, supervisor.id
    )
    assert (await _types(services, tecnico.id))["new_comment"] == 2


async def test_new_comment_skips_own_and_internal_comments(
    services: Services, tecnico: UserResult
) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    await services.tickets.assign(ticket.id, tecnico.id)

    await services.tickets.add_comment(ticket.id, {"content": "Voy en camino"}, tecnico.id)
    await services.tickets.add_comment(
        ticket.id, {"content": "Nota interna", "is_internal": True}, tecnico.id
    )
    assert (await _types(services, tecnico.id))["new_comment"] == 0


async def test_comment_on_unassigned_ticket_notifies_nobody(
    services: Services, admin: UserResult
) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    await services.tickets.add_comment(
        ticket.id, {"content": "¿Alguna novedad?", "author_name": "Ana Pérez"}
    )
    assert (await _types(services, admin.id))["new_comment"] == 0


async def test_mark_as_read(
    services: Services, admin: UserResult, supervisor: UserResult
) -> None:
    await services.tickets.create_ticket(ticket_data(priority=CRITICAL))
    [first, second] = await services.notifications.list_unread(admin.id)

    assert await services.notifications.mark_as_read(first.id, supervisor.id) is False
    assert await services.notifications.mark_as_read(first.id, admin.id) is True
    assert await services.notifications.count_unread(admin.id) == 1
    assert [n.id for n in await services.notifications.list_unread(admin.id)] == [second.id]

    assert await services.notifications.mark_all_as_read(admin.id) == 1
    assert await services.notifications.count_unread(admin.id) == 0
    assert await services.notifications.count_unread(supervisor.id) == 2


async def test_inbox_is_newest_first(services: Services, admin: UserResult) -> None:
    older = await services.tickets.create_ticket(ticket_data(subject="Primer problema"))
    newer = await services.tickets.create_ticket(ticket_data(subject="Segundo problema"))
    inbox = await services.notifications.list_all(admin.id)
    assert [n.ticket_id for n in inbox] == [newer.id, older.id]
    assert len(await services.notifications.list_all(admin.id, limit=1, offset=1)) == 1


async def test_prune_older_than(
    services: Services, admin: UserResult, clock: StepClock
) -> None:
    await services.tickets.create_ticket(ticket_data(subject="Problema antiguo"))
    clock.advance(days=31)
    recent = await services.tickets.create_ticket(ticket_data(subject="Problema reciente"))

    assert await services.notifications.prune_older_than() == 1
    remaining = await services.notifications.list_all(admin.id)
    assert [n.ticket_id for n in remaining] == [recent.id]


async def test_prune_rejects_negative_days(services: Services) -> None:
    with pytest.raises(ValueError):
        await services.notifications.prune_older_than(-1)
