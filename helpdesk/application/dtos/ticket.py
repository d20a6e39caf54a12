"""DTOs for ticket use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class TicketResult:
    """Ticket read-model. edit_token is included; callers decide who may see it."""

    id: str
    reference: str
    requester_name: str
    department: str
    support_type: str
    priority: str
    subject: str
    description: str
    image_path: str | None
    has_anydesk: bool
    anydesk_code: str | None
    status: str
    edit_token: str
    assigned_to: str | None
    created_at: datetime | None
    updated_at: datetime | None
    assigned_username: str | None = None


@dataclass(frozen=True)
class CommentResult:
    """Comment read-model."""

    id: str
    ticket_id: str
    user_id: str | None
    author_name: str
    author_email: str | None
    content: str
    is_internal: bool
    created_at: datetime | None


@dataclass(frozen=True)
class TicketWithComments:
    """Ticket plus its comments in chronological order."""

    ticket: TicketResult
    comments: list[CommentResult] = field(default_factory=list)


@dataclass
class TicketFilters:
    """Optional filters for ticket listing and stats. None means no filter."""

    status: str | None = None
    priority: str | None = None
    support_type: str | None = None
    assigned_to: str | None = None
    search: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


@dataclass(frozen=True)
class Pagination:
    """Pagination metadata for list results."""

    page: int
    per_page: int
    total: int
    total_pages: int

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


@dataclass(frozen=True)
class TicketPage:
    """One page of tickets."""

    items: list[TicketResult]
    pagination: Pagination


@dataclass(frozen=True)
class TicketStats:
    """Ticket counts: total plus one entry per status (zero when absent)."""

    total: int
    by_status: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, **self.by_status}
