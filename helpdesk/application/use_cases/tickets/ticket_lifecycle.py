"""Ticket lifecycle: creation, self-service edits, status, assignment and comments.

Every mutation commits in its own transaction before any notification is
dispatched; notification failures are logged and never undo the mutation.
Status moves are permissive: any of the four statuses may follow any other.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from functools import partial
from typing import Any

from helpdesk.application.dtos.notification import NotificationEvent
from helpdesk.application.dtos.ticket import CommentResult, TicketResult
from helpdesk.application.interfaces.repositories import ITransactionCoordinator
from helpdesk.application.interfaces.services import (
    IAuthorizationService,
    INotificationDispatcher,
)
from helpdesk.application.services.best_effort import BestEffortPolicy
from helpdesk.application.services.permission_catalog import (
    ADD_COMMENTS,
    ADD_INTERNAL_COMMENTS,
    ASSIGN_TICKETS,
    CHANGE_TICKET_STATUS,
)
from helpdesk.domain.enums import NotificationType, TicketPriority, TicketStatus
from helpdesk.domain.exceptions import (
    AuthorizationException,
    ConflictException,
    DuplicateKeyException,
    ResourceNotFoundException,
    ValidationException,
)
from helpdesk.schemas.comment import CommentCreate
from helpdesk.schemas.ticket import TicketCreate, TicketStatusUpdate, TicketUpdate
from helpdesk.schemas.validation import validate_payload
from helpdesk.shared.telemetry.logging import get_logger
from helpdesk.shared.utils.datetime import utc_now
from helpdesk.shared.utils.generators import (
    generate_edit_token,
    generate_ticket_reference,
)

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 5

# Never writable through the edit token.
PROTECTED_FIELDS: tuple[str, ...] = ("status", "assigned_to", "edit_token", "reference")

_REQUIRED_ON_UPDATE: tuple[str, ...] = (
    "requester_name",
    "department",
    "support_type",
    "priority",
    "subject",
    "description",
    "has_anydesk",
)


def _event_for(ticket: TicketResult, **extra: Any) -> NotificationEvent:
    return NotificationEvent(
        ticket_id=ticket.id,
        reference=ticket.reference,
        subject=ticket.subject,
        requester_name=ticket.requester_name,
        priority=ticket.priority,
        **extra,
    )


class TicketLifecycleService:
    """Owns every ticket mutation. Staff operations take an optional actor_id to authorize."""

    def __init__(
        self,
        coordinator: ITransactionCoordinator,
        *,
        authorization: IAuthorizationService | None = None,
        dispatcher: INotificationDispatcher | None = None,
        clock: Callable[[], datetime] = utc_now,
        reference_generator: Callable[[datetime], str] | None = None,
        token_generator: Callable[[], str] = generate_edit_token,
        reference_prefix: str = "T",
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        notification_policy: BestEffortPolicy | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._authorization = authorization
        self._dispatcher = dispatcher
        self._clock = clock
        self._reference_generator = reference_generator or partial(
            generate_ticket_reference, reference_prefix
        )
        self._token_generator = token_generator
        self._max_attempts = max(1, max_attempts)
        self._policy = notification_policy or BestEffortPolicy("notification")

    async def _authorize(
        self, actor_id: str | None, permission_name: str, resource: str = "ticket"
    ) -> None:
        if actor_id is None:
            return
        if self._authorization is None:
            raise RuntimeError(
                "TicketLifecycleService needs an authorization service to check actors"
            )
        await self._authorization.require_permission(actor_id, permission_name, resource)

    async def _notify(
        self, event_type: NotificationType, event: NotificationEvent
    ) -> None:
        if self._dispatcher is None:
            return
        await self._policy.run(
            self._dispatcher.dispatch(event_type, event),
            f"{event_type.value} dispatch for ticket {event.reference}",
        )

    async def _insert_ticket(self, payload: TicketCreate) -> TicketResult:
        """Insert with fresh reference and token; regenerate both on collision."""
        for attempt in range(1, self._max_attempts + 1):
            now = self._clock()
            fields = payload.model_dump()
            fields.update(
                reference=self._reference_generator(now),
                edit_token=self._token_generator(),
                status=TicketStatus.PENDIENTE.value,
                assigned_to=None,
                created_at=now,
                updated_at=now,
            )
            try:
                async with self._coordinator.transaction() as repos:
                    return await repos.tickets.create_ticket(**fields)
            except DuplicateKeyException:
                logger.warning(
                    "Ticket reference collision (attempt %d/%d)",
                    attempt,
                    self._max_attempts,
                )
        raise ConflictException(
            "No se pudo generar una referencia única para el ticket",
            details={"attempts": self._max_attempts},
        )

    async def create_ticket(self, data: Mapping[str, Any] | TicketCreate) -> TicketResult:
        """Create a ticket from a public submission (no authorization).

        The ticket starts Pendiente and unassigned. After commit, staff get a
        new_ticket notification, plus high_priority for top-tier priority.

        Raises:
            ValidationException: Invalid input; nothing is persisted.
            ConflictException: No unique reference after max_attempts tries.
        """
        payload = validate_payload(TicketCreate, data)
        ticket = await self._insert_ticket(payload)
        logger.info("Ticket created: %s (%s)", ticket.reference, ticket.priority)

        event = _event_for(ticket)
        await self._notify(NotificationType.NEW_TICKET, event)
        if TicketPriority(ticket.priority).is_top_tier and ticket.assigned_to is None:
            await self._notify(NotificationType.HIGH_PRIORITY, event)
        return ticket

    async def update_by_edit_token(
        self, edit_token: str, updates: Mapping[str, Any] | TicketUpdate
    ) -> TicketResult:
        """Anonymous partial edit of the requester-editable fields.

        Raises:
            ValidationException: A protected field (status, assigned_to,
                edit_token, reference) or invalid value was supplied.
            ResourceNotFoundException: Unknown token.
        """
        if isinstance(updates, Mapping):
            for field_name in PROTECTED_FIELDS:
                if field_name in updates:
                    raise ValidationException(
                        f"El campo {field_name} no se puede modificar",
                        field=field_name,
                    )
        payload = validate_payload(TicketUpdate, updates)
        changes = payload.changes()
        for field_name in _REQUIRED_ON_UPDATE:
            if field_name in changes and changes[field_name] is None:
                raise ValidationException("Campo requerido", field=field_name)

        async with self._coordinator.transaction() as repos:
            ticket = await repos.tickets.get_entity_by_edit_token(edit_token)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", "edit_token")
            has_anydesk = changes.get("has_anydesk", ticket.has_anydesk)
            if not has_anydesk:
                changes["anydesk_code"] = None
            elif not changes.get("anydesk_code", ticket.anydesk_code):
                raise ValidationException(
                    "El código de AnyDesk es requerido", field="anydesk_code"
                )
            updated = await repos.tickets.apply_changes(ticket, changes, self._clock())
        logger.info("Ticket %s updated by requester (%s)", updated.reference, sorted(changes))
        return updated

    async def change_status(
        self,
        ticket_id: str,
        new_status: str | TicketStatus,
        *,
        actor_id: str | None = None,
    ) -> TicketResult:
        """Set the status. The current assignee is notified for Resuelto/Cerrado.

        Raises:
            ValidationException: Not one of the four statuses; nothing is applied.
            ResourceNotFoundException: Unknown ticket.
        """
        await self._authorize(actor_id, CHANGE_TICKET_STATUS)
        status = new_status.value if isinstance(new_status, TicketStatus) else new_status
        payload = validate_payload(TicketStatusUpdate, {"status": status})

        async with self._coordinator.transaction() as repos:
            ticket = await repos.tickets.get_for_update(ticket_id)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", ticket_id)
            previous = ticket.status
            updated = await repos.tickets.apply_changes(
                ticket, {"status": payload.status}, self._clock()
            )
        logger.info(
            "Ticket %s status: %s -> %s", updated.reference, previous, updated.status
        )
        await self._notify(
            NotificationType.STATUS_CHANGE,
            _event_for(updated, assignee_id=updated.assigned_to, new_status=updated.status),
        )
        return updated

    async def assign(
        self,
        ticket_id: str,
        technician_id: str | None,
        *,
        actor_id: str | None = None,
    ) -> TicketResult:
        """Assign the ticket to a staff user, or clear the assignee with None.

        Raises:
            ValidationException: technician_id is not an existing user.
            ResourceNotFoundException: Unknown ticket.
        """
        await self._authorize(actor_id, ASSIGN_TICKETS)
        technician_id = technician_id or None
        async with self._coordinator.transaction() as repos:
            ticket = await repos.tickets.get_for_update(ticket_id)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", ticket_id)
            if technician_id is not None and not await repos.users.exists(technician_id):
                raise ValidationException(
                    "El técnico seleccionado no existe", field="assigned_to"
                )
            updated = await repos.tickets.apply_changes(
                ticket, {"assigned_to": technician_id}, self._clock()
            )
        logger.info("Ticket %s assigned to %s", updated.reference, technician_id)
        if technician_id is not None:
            await self._notify(
                NotificationType.TICKET_ASSIGNED,
                _event_for(updated, technician_id=technician_id),
            )
        return updated

    async def add_comment(
        self,
        ticket_id: str,
        data: Mapping[str, Any] | CommentCreate,
        commenter_id: str | None = None,
        *,
        actor_id: str | None = None,
    ) -> CommentResult:
        """Add a comment. commenter_id is the staff author, None for the requester.

        The assignee is notified of public comments by someone else.

        Raises:
            ValidationException: Invalid input or unknown commenter.
            AuthorizationException: Internal comment without staff author, or
                actor_id lacks add_comments / add_internal_comments.
            ResourceNotFoundException: Unknown ticket.
        """
        payload = validate_payload(CommentCreate, data)
        await self._authorize(actor_id, ADD_COMMENTS, "comment")
        if payload.is_internal:
            if commenter_id is None and actor_id is None:
                raise AuthorizationException(
                    resource="comment",
                    message="Solo el personal puede agregar comentarios internos",
                )
            await self._authorize(actor_id, ADD_INTERNAL_COMMENTS, "comment")

        async with self._coordinator.transaction() as repos:
            ticket = await repos.tickets.get_by_id(ticket_id)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", ticket_id)
            author_name = payload.author_name
            if commenter_id is not None:
                commenter = await repos.users.get_result_by_id(commenter_id)
                if commenter is None:
                    raise ValidationException(
                        "El usuario que comenta no existe", field="user_id"
                    )
                author_name = author_name or commenter.username
            if not author_name:
                raise ValidationException("Campo requerido", field="author_name")
            comment = await repos.comments.create_comment(
                ticket_id=ticket.id,
                author_name=author_name,
                content=payload.content,
                user_id=commenter_id,
                author_email=payload.author_email,
                is_internal=payload.is_internal,
                created_at=self._clock(),
            )
            reference = ticket.reference
            assignee_id = ticket.assigned_to
        logger.info(
            "Comment added to %s (internal=%s)", reference, comment.is_internal
        )
        if not comment.is_internal and assignee_id and assignee_id != commenter_id:
            await self._notify(
                NotificationType.NEW_COMMENT,
                NotificationEvent(
                    ticket_id=ticket_id,
                    reference=reference,
                    assignee_id=assignee_id,
                    commenter_id=commenter_id,
                    author_name=author_name,
                ),
            )
        return comment
