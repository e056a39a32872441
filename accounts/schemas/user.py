"""User API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from accounts.domain.enums import Role

PICTURE_ACTION_PATTERN = r"^[ud]$"


class UserUpdateRequest(BaseModel):
    """Request body for updating a user (sparse: only sent fields are applied)."""

    model_config = ConfigDict(extra="forbid")

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    gender: str | None = Field(default=None, max_length=20)
    timezone: str | None = Field(default=None, max_length=64)
    avatar: str | None = Field(default=None, max_length=255)


class PasswordUpdateRequest(BaseModel):
    """Request body for changing a password."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)

    @field_validator("current_password", "new_password")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("This field is required")
        return v


class UserResponse(BaseModel):
    """User response (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    gender: str | None = None
    timezone: str | None = None
    avatar: str | None = None
    roles: list[Role] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
