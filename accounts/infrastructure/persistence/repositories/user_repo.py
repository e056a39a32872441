"""User repository (IUserStore). Interface methods return application DTOs."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.application.dtos.user import UserRecord
from accounts.domain.enums import Role
from accounts.domain.exceptions import ConcurrentModificationException, ValidationException
from accounts.infrastructure.persistence.models.user import User
from accounts.shared.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

_MUTABLE_COLUMNS = (
    "email",
    "hashed_password",
    "first_name",
    "last_name",
    "gender",
    "timezone",
    "avatar",
)


def _user_to_record(u: User) -> UserRecord:
    """Map ORM User to application UserRecord; unknown role names are dropped."""
    roles = [r for r in (Role.parse(name) for name in u.roles or []) if r is not None]
    return UserRecord(
        id=u.id,
        email=u.email,
        hashed_password=u.hashed_password,
        first_name=u.first_name,
        last_name=u.last_name,
        gender=u.gender,
        timezone=u.timezone,
        avatar=u.avatar,
        roles=roles,
        version=u.version,
        created_at=ensure_utc(u.created_at),
        updated_at=ensure_utc(u.updated_at),
    )


class UserRepository:
    """SQLAlchemy user store with optimistic locking on User.version."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_row(self, user_id: str) -> User | None:
        result = await self.db.execute(
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[UserRecord]:
        result = await self.db.execute(select(User).order_by(User.created_at, User.id))
        return [_user_to_record(u) for u in result.scalars().all()]

    async def get_by_id(self, user_id: str) -> UserRecord | None:
        user = await self._get_row(user_id)
        return _user_to_record(user) if user else None

    async def get_by_email(self, email: str) -> UserRecord | None:
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        return _user_to_record(user) if user else None

    async def add(self, user: UserRecord) -> UserRecord:
        """Insert a user. Raises ValidationException when the email is already taken."""
        row = User(
            id=user.id,
            email=user.email,
            hashed_password=user.hashed_password,
            first_name=user.first_name,
            last_name=user.last_name,
            gender=user.gender,
            timezone=user.timezone,
            avatar=user.avatar,
            roles=[r.value for r in user.roles],
            version=1,
        )
        self.db.add(row)
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise ValidationException("Email is already registered", field="email") from e
        await self.db.refresh(row)
        return _user_to_record(row)

    async def update(self, user: UserRecord) -> UserRecord:
        """Write all mutable columns if user.version is still current; bump version.

        Raises:
            ConcurrentModificationException: Row changed (or vanished) since user was read.
        """
        values = {name: getattr(user, name) for name in _MUTABLE_COLUMNS}
        values["roles"] = [r.value for r in user.roles]
        values["version"] = user.version + 1
        result = await self.db.execute(
            update(User)
            .where(User.id == user.id, User.version == user.version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning("Stale update for user %s at version %d", user.id, user.version)
            raise ConcurrentModificationException(user.id)
        row = await self._get_row(user.id)
        if row is None:
            raise ConcurrentModificationException(user.id)
        return _user_to_record(row)

    async def delete(self, user_id: str) -> bool:
        result = await self.db.execute(delete(User).where(User.id == user_id))
        return bool(result.rowcount)
