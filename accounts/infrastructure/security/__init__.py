"""Security: JWT decoding and password hashing."""

from accounts.infrastructure.security.jwt import create_access_token, verify_token
from accounts.infrastructure.security.password import (
    BcryptPasswordHasher,
    get_password_hash,
    verify_password,
)

__all__ = [
    "BcryptPasswordHasher",
    "create_access_token",
    "get_password_hash",
    "verify_password",
    "verify_token",
]
