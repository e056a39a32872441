"""Pydantic request/response schemas for the HTTP surface."""

from accounts.schemas.common import ServiceResponse
from accounts.schemas.health import HealthResponse
from accounts.schemas.user import (
    PasswordUpdateRequest,
    UserResponse,
    UserUpdateRequest,
)

__all__ = [
    "HealthResponse",
    "PasswordUpdateRequest",
    "ServiceResponse",
    "UserResponse",
    "UserUpdateRequest",
]
