"""Ticket repository. Read methods return TicketResult; get_by_id/get_for_update return ORM."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.application.dtos.ticket import TicketFilters, TicketResult
from helpdesk.domain.exceptions import DuplicateKeyException
from helpdesk.infrastructure.persistence.models.ticket import Ticket
from helpdesk.infrastructure.persistence.models.user import User
from helpdesk.infrastructure.persistence.repositories.base import BaseRepository
from helpdesk.shared.utils.datetime import ensure_utc


def _ticket_to_result(t: Ticket, assigned_username: str | None = None) -> TicketResult:
    """Map ORM Ticket to application TicketResult."""
    return TicketResult(
        id=t.id,
        reference=t.reference,
        requester_name=t.requester_name,
        department=t.department,
        support_type=t.support_type,
        priority=t.priority,
        subject=t.subject,
        description=t.description,
        image_path=t.image_path,
        has_anydesk=t.has_anydesk,
        anydesk_code=t.anydesk_code,
        status=t.status,
        edit_token=t.edit_token,
        assigned_to=t.assigned_to,
        created_at=ensure_utc(t.created_at),
        updated_at=ensure_utc(t.updated_at),
        assigned_username=assigned_username,
    )


def _escape_like(text: str) -> str:
    """Make % and _ in user search text match literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _apply_filters(query: Select[Any], filters: TicketFilters | None) -> Select[Any]:
    if filters is None:
        return query
    if filters.status:
        query = query.where(Ticket.status == filters.status)
    if filters.priority:
        query = query.where(Ticket.priority == filters.priority)
    if filters.support_type:
        query = query.where(Ticket.support_type == filters.support_type)
    if filters.assigned_to:
        query = query.where(Ticket.assigned_to == filters.assigned_to)
    if filters.date_from:
        query = query.where(Ticket.created_at >= filters.date_from)
    if filters.date_to:
        query = query.where(Ticket.created_at <= filters.date_to)
    if filters.search:
        pattern = f"%{_escape_like(filters.search)}%"
        query = query.where(
            or_(
                Ticket.reference.ilike(pattern, escape="\\"),
                Ticket.requester_name.ilike(pattern, escape="\\"),
                Ticket.department.ilike(pattern, escape="\\"),
                Ticket.subject.ilike(pattern, escape="\\"),
            )
        )
    return query


class TicketRepository(BaseRepository[Ticket]):
    """Ticket repository: create with unique reference/token, lookups, listing and stats."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Ticket)

    def _with_assignee(self) -> Select[Any]:
        return select(Ticket, User.username).outerjoin(
            User, User.id == Ticket.assigned_to
        )

    async def create_ticket(self, **fields: Any) -> TicketResult:
        """Insert a ticket.

        Raises:
            DuplicateKeyException: On reference or edit_token collision. The
                surrounding transaction is no longer usable; retry in a new one.
        """
        ticket = Ticket(**fields)
        try:
            created = await self.create(ticket)
        except IntegrityError:
            raise DuplicateKeyException(
                "ticket", details_extra={"reference": fields.get("reference")}
            ) from None
        return _ticket_to_result(created)

    async def get_result_by_id(self, ticket_id: str) -> TicketResult | None:
        result = await self.db.execute(
            self._with_assignee().where(Ticket.id == ticket_id)
        )
        row = result.first()
        return _ticket_to_result(row[0], row[1]) if row else None

    async def get_by_reference(self, reference: str) -> TicketResult | None:
        result = await self.db.execute(
            self._with_assignee().where(Ticket.reference == reference)
        )
        row = result.first()
        return _ticket_to_result(row[0], row[1]) if row else None

    async def get_entity_by_edit_token(self, edit_token: str) -> Ticket | None:
        """Return ticket ORM by edit token (row-locked) for anonymous updates."""
        result = await self.db.execute(
            select(Ticket).where(Ticket.edit_token == edit_token).with_for_update()
        )
        return result.scalar_one_or_none()

    async def apply_changes(
        self, ticket: Ticket, changes: dict[str, Any], updated_at: datetime
    ) -> TicketResult:
        """Set the given columns and stamp updated_at."""
        for key, value in changes.items():
            setattr(ticket, key, value)
        ticket.updated_at = updated_at
        updated = await self.save(ticket)
        return _ticket_to_result(updated)

    async def list_page(
        self, filters: TicketFilters | None, offset: int, limit: int
    ) -> tuple[list[TicketResult], int]:
        """Return (tickets newest first, total matching)."""
        count_q = _apply_filters(select(func.count(Ticket.id)), filters)
        total = int((await self.db.execute(count_q)).scalar_one())
        query = (
            _apply_filters(self._with_assignee(), filters)
            .order_by(Ticket.created_at.desc(), Ticket.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return [_ticket_to_result(t, name) for t, name in result.all()], total

    async def count_by_status(self, filters: TicketFilters | None = None) -> dict[str, int]:
        query = _apply_filters(
            select(Ticket.status, func.count(Ticket.id)), filters
        ).group_by(Ticket.status)
        result = await self.db.execute(query)
        return {status: int(count) for status, count in result.all()}
