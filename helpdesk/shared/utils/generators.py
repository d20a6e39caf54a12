"""ID and value generators (CUID, ticket reference, edit token)."""

import secrets
import uuid
from datetime import datetime

from cuid2 import cuid_wrapper

from helpdesk.shared.utils.datetime import utc_now

cuid_generator = cuid_wrapper()

# 32 random bytes -> 43 url-safe characters
_EDIT_TOKEN_BYTES = 32


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_ticket_reference(prefix: str = "T", now: datetime | None = None) -> str:
    """Return a human-readable ticket reference like ``T-250314-9F1C2A7B``.

    Date-stamped (YYMMDD, UTC) with an 8 hex character random suffix.
    Uniqueness is enforced by the database; callers retry on collision.
    """
    stamp = (now or utc_now()).strftime("%y%m%d")
    suffix = uuid.uuid4().hex[:8].upper()
    return f"{prefix}-{stamp}-{suffix}"


def generate_edit_token() -> str:
    """Return an opaque high-entropy secret for anonymous ticket edits."""
    return secrets.token_urlsafe(_EDIT_TOKEN_BYTES)
