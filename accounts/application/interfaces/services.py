"""Service interfaces (ports) used by application services."""

from typing import Protocol


class IPasswordHasher(Protocol):
    """Password hashing and verification (bcrypt in production)."""

    def hash_password(self, password: str) -> str:
        """Return a hash of password."""
        ...

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Return True if plain_password matches hashed_password."""
        ...
