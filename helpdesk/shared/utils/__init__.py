"""Shared utilities: datetime and generators."""

from helpdesk.shared.utils.datetime import days_ago, ensure_utc, utc_now
from helpdesk.shared.utils.generators import (
    generate_cuid,
    generate_edit_token,
    generate_ticket_reference,
)

__all__ = [
    "days_ago",
    "ensure_utc",
    "generate_cuid",
    "generate_edit_token",
    "generate_ticket_reference",
    "utc_now",
]
