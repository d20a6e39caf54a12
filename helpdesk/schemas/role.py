"""Role input schemas."""

from pydantic import BaseModel, ConfigDict, Field


class RoleCreateRequest(BaseModel):
    """New custom role. permission_ids that do not exist are ignored."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-z_]+$")
    display_name: str = Field(..., min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    permission_ids: list[str] = Field(default_factory=list)


class RoleUpdateRequest(BaseModel):
    """Role edit. permission_ids replaces the whole grant set."""

    model_config = ConfigDict(str_strip_whitespace=True)

    display_name: str = Field(..., min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    permission_ids: list[str] = Field(default_factory=list)
