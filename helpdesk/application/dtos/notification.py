"""DTOs for notifications (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class NotificationResult:
    """Notification read-model."""

    id: str
    user_id: str
    type: str
    title: str
    message: str
    ticket_id: str | None
    is_read: bool
    created_at: datetime | None
    ticket_reference: str | None = None


@dataclass(frozen=True)
class NotificationEvent:
    """Lifecycle event handed to the dispatcher after the ticket mutation commits.

    Fields are optional because each event type uses a different subset:
    new_ticket/high_priority use the ticket fields, ticket_assigned uses
    technician_id, new_comment uses assignee_id and commenter_id, and
    status_change uses assignee_id and new_status.
    """

    ticket_id: str
    reference: str
    subject: str = ""
    requester_name: str = ""
    priority: str | None = None
    technician_id: str | None = None
    assignee_id: str | None = None
    commenter_id: str | None = None
    author_name: str | None = None
    new_status: str | None = None
