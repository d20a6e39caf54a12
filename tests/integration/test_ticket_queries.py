"""Integration tests for TicketQueryService (lookups, pagination, stats, technicians)."""

from datetime import timedelta

import pytest

from helpdesk.application.dtos.ticket import TicketFilters
from helpdesk.application.dtos.user import UserResult
from helpdesk.composition import Services
from helpdesk.domain.exceptions import ResourceNotFoundException, ValidationException
from tests.factories import StepClock, make_user, ticket_data


async def _create_many(services: Services, count: int) -> list[str]:
    references = []
    for i in range(count):
        ticket = await services.tickets.create_ticket(
            ticket_data(subject=f"Problema número {i:02d}")
        )
        references.append(ticket.reference)
    return references


async def test_get_by_reference(services: Services) -> None:
    ticket = await services.tickets.create_ticket(ticket_data())
    found = await services.ticket_queries.get_by_reference(ticket.reference)
    assert found.id == ticket.id
    with pytest.raises(ResourceNotFoundException):
        await services.ticket_queries.get_by_reference("T-000000-MISSING0")


async def test_list_tickets_paginates_newest_first(services: Services) -> None:
    references = await _create_many(services, 5)

    first = await services.ticket_queries.list_tickets(page=1, per_page=2)
    assert [t.reference for t in first.items] == references[::-1][:2]
    assert first.pagination.total == 5
    assert first.pagination.total_pages == 3
    assert first.pagination.has_next and not first.pagination.has_prev

    last = await services.ticket_queries.list_tickets(page=3, per_page=2)
    assert [t.reference for t in last.items] == [references[0]]
    assert last.pagination.has_prev and not last.pagination.has_next


async def test_list_tickets_caps_per_page(services: Services) -> None:
    page = await services.ticket_queries.list_tickets(per_page=1000)
    assert page.pagination.per_page == 100
    assert page.pagination.total_pages == 0
    assert page.items == []


@pytest.mark.parametrize(("page", "per_page", "field"), [(0, 15, "page"), (1, 0, "per_page")])
async def test_list_tickets_rejects_bad_paging(
    services: Services, page: int, per_page: int, field: str
) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await services.ticket_queries.list_tickets(page=page, per_page=per_page)
    assert exc_info.value.details["field"] == field


async def test_list_tickets_filters(services: Services, tecnico: UserResult) -> None:
    printer = await services.tickets.create_ticket(ticket_data())
    network = await services.tickets.create_ticket(
        ticket_data(
            support_type="Red e Internet",
            subject="Sin acceso a internet",
            department="Ventas",
        )
    )
    await services.tickets.assign(network.id, tecnico.id)
    await services.tickets.change_status(printer.id, "Resuelto")

    queries = services.ticket_queries
    by_status = await queries.list_tickets(TicketFilters(status="Resuelto"))
    assert [t.id for t in by_status.items] == [printer.id]

    by_type = await queries.list_tickets(TicketFilters(support_type="Red e Internet"))
    assert [t.id for t in by_type.items] == [network.id]

    by_assignee = await queries.list_tickets(TicketFilters(assigned_to=tecnico.id))
    assert [t.id for t in by_assignee.items] == [network.id]
    assert by_assignee.items[0].assigned_username == "tecnico_user"

    by_search = await queries.list_tickets(TicketFilters(search="ventas"))
    assert [t.id for t in by_search.items] == [network.id]

    with pytest.raises(ValidationException):
        await queries.list_tickets(TicketFilters(status="Abierto"))


async def test_search_matches_wildcards_literally(services: Services) -> None:
    percent = await services.tickets.create_ticket(ticket_data(subject="Descuento 50% en licencias"))
    await services.tickets.create_ticket(ticket_data(subject="Disco al 50 por ciento"))
    underscore = await services.tickets.create_ticket(ticket_data(subject="Fallo en red_local"))
    await services.tickets.create_ticket(ticket_data(subject="Fallo en redXlocal"))

    queries = services.ticket_queries
    by_percent = await queries.list_tickets(TicketFilters(search="50%"))
    assert [t.id for t in by_percent.items] == [percent.id]
    by_underscore = await queries.list_tickets(TicketFilters(search="red_local"))
    assert [t.id for t in by_underscore.items] == [underscore.id]


async def test_list_tickets_date_range(services: Services, clock: StepClock) -> None:
    old = await services.tickets.create_ticket(ticket_data(subject="Problema antiguo"))
    clock.advance(days=10)
    new = await services.tickets.create_ticket(ticket_data(subject="Problema reciente"))

    assert old.created_at is not None
    since = old.created_at + timedelta(days=1)
    page = await services.ticket_queries.list_tickets(TicketFilters(date_from=since))
    assert [t.id for t in page.items] == [new.id]
    page = await services.ticket_queries.list_tickets(TicketFilters(date_to=since))
    assert [t.id for t in page.items] == [old.id]


async def test_get_stats_lists_every_status(services: Services) -> None:
    empty = await services.ticket_queries.get_stats()
    assert empty.to_dict() == {
        "total": 0,
        "Pendiente": 0,
        "En Proceso": 0,
        "Resuelto": 0,
        "Cerrado": 0,
    }

    first, second, _ = [
        await services.tickets.create_ticket(ticket_data()) for _ in range(3)
    ]
    await services.tickets.change_status(first.id, "En Proceso")
    await services.tickets.change_status(second.id, "Cerrado")

    stats = await services.ticket_queries.get_stats()
    assert stats.total == 3
    assert stats.by_status == {
        "Pendiente": 1,
        "En Proceso": 1,
        "Resuelto": 0,
        "Cerrado": 1,
    }


async def test_list_technicians_ordered_by_role_then_username(
    services: Services,
    admin: UserResult,
    supervisor: UserResult,
    tecnico: UserResult,
    role_ids: dict[str, str],
) -> None:
    await make_user(services, "aaa_tecnico", role_ids["tecnico"])
    custom_role = await services.roles.create_role({"name": "auditor", "display_name": "Auditor"})
    await make_user(services, "auditor1", custom_role)

    technicians = await services.ticket_queries.list_technicians()
    assert [u.username for u in technicians] == [
        "admin_user",
        "supervisor_user",
        "aaa_tecnico",
        "tecnico_user",
    ]
