"""Read side of tickets: lookups, listing with pagination, stats and assignable staff."""

from __future__ import annotations

import math

from helpdesk.application.dtos.ticket import (
    Pagination,
    TicketFilters,
    TicketPage,
    TicketResult,
    TicketStats,
    TicketWithComments,
)
from helpdesk.application.dtos.user import UserResult
from helpdesk.application.interfaces.repositories import ITransactionCoordinator
from helpdesk.application.services.permission_catalog import ASSIGNABLE_ROLES
from helpdesk.domain.enums import TicketStatus
from helpdesk.domain.exceptions import ResourceNotFoundException, ValidationException

DEFAULT_PER_PAGE = 15
MAX_PER_PAGE = 100


class TicketQueryService:
    def __init__(self, coordinator: ITransactionCoordinator) -> None:
        self._coordinator = coordinator

    async def get_by_reference(self, reference: str) -> TicketResult:
        """Raises ResourceNotFoundException for an unknown reference."""
        async with self._coordinator.read() as repos:
            ticket = await repos.tickets.get_by_reference(reference)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", reference)
        return ticket

    async def get_with_comments(
        self, reference: str, include_internal: bool = False
    ) -> TicketWithComments:
        """Ticket plus comments oldest first; internal ones only for staff views."""
        async with self._coordinator.read() as repos:
            ticket = await repos.tickets.get_by_reference(reference)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", reference)
            comments = await repos.comments.list_for_ticket(
                ticket.id, include_internal=include_internal
            )
        return TicketWithComments(ticket=ticket, comments=comments)

    async def list_tickets(
        self,
        filters: TicketFilters | None = None,
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> TicketPage:
        """Newest first. page is 1-based; per_page is capped at MAX_PER_PAGE."""
        if page < 1:
            raise ValidationException("La página debe ser mayor o igual a 1", field="page")
        if per_page < 1:
            raise ValidationException("per_page debe ser mayor o igual a 1", field="per_page")
        per_page = min(per_page, MAX_PER_PAGE)
        if filters and filters.status and filters.status not in TicketStatus.values():
            raise ValidationException("Estado inválido", field="status")
        async with self._coordinator.read() as repos:
            items, total = await repos.tickets.list_page(
                filters, offset=(page - 1) * per_page, limit=per_page
            )
        return TicketPage(
            items=items,
            pagination=Pagination(
                page=page,
                per_page=per_page,
                total=total,
                total_pages=math.ceil(total / per_page),
            ),
        )

    async def get_stats(self, filters: TicketFilters | None = None) -> TicketStats:
        """Counts per status (every status present, zero when empty) and the total."""
        async with self._coordinator.read() as repos:
            counts = await repos.tickets.count_by_status(filters)
        by_status = {status: counts.get(status, 0) for status in TicketStatus.values()}
        return TicketStats(total=sum(counts.values()), by_status=by_status)

    async def list_technicians(self) -> list[UserResult]:
        """Users who can be assigned tickets: admins, then supervisors, then technicians."""
        async with self._coordinator.read() as repos:
            users = await repos.users.list_by_role_names(ASSIGNABLE_ROLES)
        rank = {name: i for i, name in enumerate(ASSIGNABLE_ROLES)}
        return sorted(users, key=lambda u: (rank.get(u.role_name or "", len(rank)), u.username))
