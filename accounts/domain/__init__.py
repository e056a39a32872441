"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from accounts.domain.enums import PictureAction, Role
from accounts.domain.exceptions import (
    AccountsException,
    AuthenticationException,
    AuthorizationException,
    ConcurrentModificationException,
    PasswordMismatchException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    # Enums
    "PictureAction",
    "Role",
    # Exceptions
    "AccountsException",
    "AuthenticationException",
    "AuthorizationException",
    "ConcurrentModificationException",
    "PasswordMismatchException",
    "ResourceNotFoundException",
    "ValidationException",
]
