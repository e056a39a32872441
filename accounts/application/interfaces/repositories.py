"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from accounts.application.dtos.user import UserRecord


class IUserStore(Protocol):
    """Protocol for the user store (DIP)."""

    async def list_all(self) -> list[UserRecord]:
        """Return every user."""

    async def get_by_id(self, user_id: str) -> UserRecord | None:
        """Return user by ID, or None."""

    async def get_by_email(self, email: str) -> UserRecord | None:
        """Return user by email, or None."""

    async def add(self, user: UserRecord) -> UserRecord:
        """Insert a new user and return the stored record."""

    async def update(self, user: UserRecord) -> UserRecord:
        """Persist user. Raises ConcurrentModificationException when user.version is stale."""

    async def delete(self, user_id: str) -> bool:
        """Delete user. Returns True if deleted, False if not found."""
