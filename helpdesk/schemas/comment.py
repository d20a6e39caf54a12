"""Comment input schema."""

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class CommentCreate(BaseModel):
    """New comment. author_name falls back to the staff username when omitted."""

    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1, max_length=5000)
    author_name: str | None = Field(default=None, min_length=2, max_length=100)
    author_email: EmailStr | None = None
    is_internal: bool = False

    @field_validator("author_email", "author_name", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("is_internal", mode="before")
    @classmethod
    def _parse_is_internal(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "yes", "on", "1")
        return bool(value)
