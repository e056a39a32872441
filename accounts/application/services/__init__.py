"""Application services: authorization gate and user operations."""

from accounts.application.services.authorization_service import (
    OPERATION_RULES,
    AuthorizationGate,
    RequireAnyRole,
    RequireAuthenticated,
    RequireRole,
)
from accounts.application.services.user_service import PictureUpload, UserService

__all__ = [
    "OPERATION_RULES",
    "AuthorizationGate",
    "PictureUpload",
    "RequireAnyRole",
    "RequireAuthenticated",
    "RequireRole",
    "UserService",
]
