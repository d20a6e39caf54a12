"""Notification fan-out for ticket lifecycle events, and the per-user inbox.

dispatch() runs after the triggering mutation has committed. Each
notification row is written in its own transaction under BestEffortPolicy,
so one failed row neither stops the others nor touches the ticket.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime

from helpdesk.application.dtos.notification import NotificationEvent, NotificationResult
from helpdesk.application.interfaces.repositories import ITransactionCoordinator
from helpdesk.application.services.best_effort import BestEffortPolicy
from helpdesk.application.services.permission_catalog import STAFF_NOTIFICATION_ROLES
from helpdesk.domain.enums import NotificationType, TicketStatus
from helpdesk.shared.telemetry.logging import get_logger
from helpdesk.shared.utils.datetime import days_ago, utc_now

logger = get_logger(__name__)

DEFAULT_RETENTION_DAYS = 30

_TITLES: dict[NotificationType, str] = {
    NotificationType.NEW_TICKET: "🎫 Nuevo ticket creado",
    NotificationType.TICKET_ASSIGNED: "📋 Ticket asignado",
    NotificationType.NEW_COMMENT: "💬 Nuevo comentario",
    NotificationType.STATUS_CHANGE: "🔄 Estado actualizado",
    NotificationType.HIGH_PRIORITY: "⚠️ Ticket de alta prioridad",
}


def _message(event_type: NotificationType, event: NotificationEvent) -> str:
    if event_type is NotificationType.NEW_TICKET:
        return f"Ticket {event.reference} - {event.subject}"
    if event_type is NotificationType.HIGH_PRIORITY:
        return f"Ticket {event.reference} sin asignar - {event.subject}"
    if event_type is NotificationType.TICKET_ASSIGNED:
        return f"Se te ha asignado el ticket {event.reference}"
    if event_type is NotificationType.NEW_COMMENT:
        return f"Nuevo comentario en el ticket {event.reference}"
    return f"El ticket {event.reference} ahora está: {event.new_status}"


def _is_terminal_status(status: str | None) -> bool:
    return status in (TicketStatus.RESUELTO.value, TicketStatus.CERRADO.value)


class NotificationDispatcher:
    """Resolves recipients per event type and writes one row per recipient."""

    def __init__(
        self,
        coordinator: ITransactionCoordinator,
        *,
        clock: Callable[[], datetime] = utc_now,
        policy: BestEffortPolicy | None = None,
        staff_roles: Iterable[str] = STAFF_NOTIFICATION_ROLES,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> None:
        self._coordinator = coordinator
        self._clock = clock
        self._policy = policy or BestEffortPolicy("notification")
        self._staff_roles = tuple(staff_roles)
        self._retention_days = retention_days

    async def _staff_recipients(self) -> list[str]:
        async with self._coordinator.read() as repos:
            users = await repos.users.list_by_role_names(self._staff_roles)
        return [u.id for u in users]

    async def resolve_recipients(
        self, event_type: NotificationType, event: NotificationEvent
    ) -> list[str]:
        """User ids to notify, without duplicates, in a stable order."""
        if event_type in (NotificationType.NEW_TICKET, NotificationType.HIGH_PRIORITY):
            recipients = await self._staff_recipients()
        elif event_type is NotificationType.TICKET_ASSIGNED:
            recipients = [event.technician_id] if event.technician_id else []
        elif event_type is NotificationType.NEW_COMMENT:
            if event.assignee_id and event.assignee_id != event.commenter_id:
                recipients = [event.assignee_id]
            else:
                recipients = []
        elif event_type is NotificationType.STATUS_CHANGE:
            if event.assignee_id and _is_terminal_status(event.new_status):
                recipients = [event.assignee_id]
            else:
                recipients = []
        else:
            raise ValueError(f"Unknown notification type: {event_type}")
        return list(dict.fromkeys(recipients))

    async def _write(
        self, user_id: str, event_type: NotificationType, event: NotificationEvent
    ) -> NotificationResult:
        async with self._coordinator.transaction() as repos:
            return await repos.notifications.create_notification(
                user_id=user_id,
                type=event_type.value,
                title=_TITLES[event_type],
                message=_message(event_type, event),
                ticket_id=event.ticket_id,
                created_at=self._clock(),
            )

    async def dispatch(
        self, event_type: NotificationType, event: NotificationEvent
    ) -> int:
        """Write one notification per recipient; return how many rows were written."""
        recipients = await self.resolve_recipients(event_type, event)
        written = 0
        for user_id in recipients:
            result = await self._policy.run(
                self._write(user_id, event_type, event),
                f"{event_type.value} for user {user_id} on ticket {event.reference}",
            )
            if result is not None:
                written += 1
        if recipients:
            logger.debug(
                "Dispatched %s for %s: %d/%d written",
                event_type.value,
                event.reference,
                written,
                len(recipients),
            )
        return written

    async def mark_as_read(self, notification_id: str, user_id: str) -> bool:
        """Mark one of the user's notifications as read. Idempotent; other users' rows never match."""
        async with self._coordinator.transaction() as repos:
            return await repos.notifications.mark_as_read(notification_id, user_id)

    async def mark_all_as_read(self, user_id: str) -> int:
        async with self._coordinator.transaction() as repos:
            return await repos.notifications.mark_all_as_read(user_id)

    async def list_unread(self, user_id: str, limit: int = 10) -> list[NotificationResult]:
        async with self._coordinator.read() as repos:
            return await repos.notifications.list_for_user(
                user_id, unread_only=True, limit=limit
            )

    async def list_all(
        self, user_id: str, limit: int = 20, offset: int = 0
    ) -> list[NotificationResult]:
        async with self._coordinator.read() as repos:
            return await repos.notifications.list_for_user(
                user_id, limit=limit, offset=offset
            )

    async def count_unread(self, user_id: str) -> int:
        async with self._coordinator.read() as repos:
            return await repos.notifications.count_unread(user_id)

    async def prune_older_than(self, days: int | None = None) -> int:
        """Delete notifications created more than `days` days ago; return rows deleted."""
        retention = self._retention_days if days is None else days
        if retention < 0:
            raise ValueError("days must be >= 0")
        cutoff = days_ago(retention, now=self._clock())
        async with self._coordinator.transaction() as repos:
            deleted = await repos.notifications.delete_created_before(cutoff)
        logger.info("Pruned %d notifications older than %d days", deleted, retention)
        return deleted
