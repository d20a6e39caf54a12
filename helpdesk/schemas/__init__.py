"""Input schemas (pydantic) and the validation helper used by services."""

from helpdesk.schemas.comment import CommentCreate
from helpdesk.schemas.role import RoleCreateRequest, RoleUpdateRequest
from helpdesk.schemas.ticket import TicketCreate, TicketStatusUpdate, TicketUpdate
from helpdesk.schemas.user import (
    LoginRequest,
    PasswordChangeRequest,
    UserCreateRequest,
    UsernameUpdateRequest,
)
from helpdesk.schemas.validation import validate_payload

__all__ = [
    "CommentCreate",
    "LoginRequest",
    "PasswordChangeRequest",
    "RoleCreateRequest",
    "RoleUpdateRequest",
    "TicketCreate",
    "TicketStatusUpdate",
    "TicketUpdate",
    "UserCreateRequest",
    "UsernameUpdateRequest",
    "validate_payload",
]
