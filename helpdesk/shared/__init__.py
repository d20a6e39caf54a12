"""Shared utilities: telemetry and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from helpdesk.shared.utils import (
    ensure_utc,
    generate_cuid,
    generate_edit_token,
    generate_ticket_reference,
    utc_now,
)

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "generate_edit_token",
    "generate_ticket_reference",
    "utc_now",
]
