"""Notification repository: per-user inbox rows."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.application.dtos.notification import NotificationResult
from helpdesk.infrastructure.persistence.models.notification import Notification
from helpdesk.infrastructure.persistence.models.ticket import Ticket
from helpdesk.infrastructure.persistence.repositories.base import BaseRepository
from helpdesk.shared.utils.datetime import ensure_utc


def _notification_to_result(
    n: Notification, ticket_reference: str | None = None
) -> NotificationResult:
    return NotificationResult(
        id=n.id,
        user_id=n.user_id,
        type=n.type,
        title=n.title,
        message=n.message,
        ticket_id=n.ticket_id,
        is_read=n.is_read,
        created_at=ensure_utc(n.created_at),
        ticket_reference=ticket_reference,
    )


class NotificationRepository(BaseRepository[Notification]):
    """Notification rows. Only is_read is ever mutated after insert."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Notification)

    async def create_notification(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        ticket_id: str | None = None,
        created_at: datetime | None = None,
    ) -> NotificationResult:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            ticket_id=ticket_id,
        )
        if created_at is not None:
            notification.created_at = created_at
        created = await self.create(notification)
        return _notification_to_result(created)

    async def mark_as_read(self, notification_id: str, user_id: str) -> bool:
        """Flag one notification as read. Only the owner's row matches."""
        result = await self.db.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
        )
        return (result.rowcount or 0) > 0

    async def mark_all_as_read(self, user_id: str) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount or 0

    async def list_for_user(
        self,
        user_id: str,
        *,
        unread_only: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> list[NotificationResult]:
        """Newest first, with the ticket reference when the ticket still exists."""
        query = (
            select(Notification, Ticket.reference)
            .outerjoin(Ticket, Ticket.id == Notification.ticket_id)
            .where(Notification.user_id == user_id)
        )
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = (
            query.order_by(Notification.created_at.desc(), Notification.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return [_notification_to_result(n, ref) for n, ref in result.all()]

    async def count_unread(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        )
        return int(result.scalar_one())

    async def delete_created_before(self, cutoff: datetime) -> int:
        result = await self.db.execute(
            delete(Notification).where(Notification.created_at < cutoff)
        )
        return result.rowcount or 0
