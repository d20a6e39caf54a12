"""Ticket use cases: lifecycle mutations and read queries."""

from helpdesk.application.use_cases.tickets.ticket_lifecycle import (
    TicketLifecycleService,
)
from helpdesk.application.use_cases.tickets.ticket_queries import TicketQueryService

__all__ = ["TicketLifecycleService", "TicketQueryService"]
