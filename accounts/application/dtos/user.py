"""DTOs for user use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime

from accounts.domain.enums import Role


@dataclass
class UserRecord:
    """User as seen by the application layer.

    Mutable so a loaded record can be changed in memory and handed back to the
    store. version is the optimistic-lock counter the store checks on update.
    """

    id: str
    email: str
    hashed_password: str
    first_name: str | None = None
    last_name: str | None = None
    gender: str | None = None
    timezone: str | None = None
    avatar: str | None = None
    roles: list[Role] = field(default_factory=list)
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Caller:
    """Identity and role set resolved for one request by the authentication layer."""

    id: str
    email: str
    roles: frozenset[Role] = frozenset()

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    def has_any_role(self, *roles: Role) -> bool:
        return any(r in self.roles for r in roles)


@dataclass(frozen=True)
class StoredFile:
    """Picture content resolved from the file store."""

    reference: str
    content_type: str
    size: int
