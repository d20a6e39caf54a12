"""DTOs for user use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserResult:
    """User read-model with the resolved role. Never carries the password hash."""

    id: str
    username: str
    role_id: str
    role_name: str | None = None
    role_display_name: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class UserCredentials:
    """Internal: id and hash for authentication. Never returned past the service."""

    id: str
    username: str
    password_hash: str
