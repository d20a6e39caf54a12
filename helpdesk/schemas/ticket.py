"""Ticket input schemas (public submission, edit-token self service, status change)."""

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)

from helpdesk.domain.enums import SupportType, TicketPriority, TicketStatus


def _as_bool(value: Any) -> bool:
    """Form checkboxes send 'yes' / 'true'; anything else is False."""
    if isinstance(value, str):
        return value.strip().lower() in ("yes", "true", "on", "1")
    return bool(value)


def _check_support_type(value: str | None) -> str | None:
    if value is not None and value not in SupportType.values():
        raise ValueError("Tipo de soporte inválido")
    return value


def _check_priority(value: str | None) -> str | None:
    if value is not None and value not in TicketPriority.values():
        raise ValueError("Prioridad inválida")
    return value


class TicketCreate(BaseModel):
    """Public ticket submission."""

    model_config = ConfigDict(str_strip_whitespace=True)

    requester_name: str = Field(..., min_length=2, max_length=100)
    department: str = Field(..., min_length=2, max_length=100)
    support_type: str
    priority: str
    subject: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=10, max_length=5000)
    has_anydesk: bool = False
    anydesk_code: str | None = Field(default=None, max_length=50, validate_default=True)
    image_path: str | None = None

    validate_support_type = field_validator("support_type")(_check_support_type)
    validate_priority = field_validator("priority")(_check_priority)

    @field_validator("has_anydesk", mode="before")
    @classmethod
    def _parse_has_anydesk(cls, value: Any) -> bool:
        return _as_bool(value)

    @field_validator("anydesk_code", "image_path", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("anydesk_code")
    @classmethod
    def _anydesk_code_required(
        cls, value: str | None, info: ValidationInfo
    ) -> str | None:
        if not info.data.get("has_anydesk"):
            return None
        if not value:
            raise ValueError("El código de AnyDesk es requerido")
        return value


class TicketUpdate(BaseModel):
    """Partial update through the edit token. Only requester-editable fields are accepted."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    requester_name: str | None = Field(default=None, min_length=2, max_length=100)
    department: str | None = Field(default=None, min_length=2, max_length=100)
    support_type: str | None = None
    priority: str | None = None
    subject: str | None = Field(default=None, min_length=5, max_length=200)
    description: str | None = Field(default=None, min_length=10, max_length=5000)
    has_anydesk: bool | None = None
    anydesk_code: str | None = Field(default=None, max_length=50)
    image_path: str | None = None

    validate_support_type = field_validator("support_type")(_check_support_type)
    validate_priority = field_validator("priority")(_check_priority)

    @field_validator("has_anydesk", mode="before")
    @classmethod
    def _parse_has_anydesk(cls, value: Any) -> bool | None:
        return None if value is None else _as_bool(value)

    @field_validator("image_path", mode="before")
    @classmethod
    def _blank_image_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller."""
        return self.model_dump(exclude_unset=True)


class TicketStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def _check_status(cls, value: str) -> str:
        if value not in TicketStatus.values():
            raise ValueError("Estado inválido")
        return value
