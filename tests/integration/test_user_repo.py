"""User repository integration tests against a throwaway sqlite database (aiosqlite)."""

from collections.abc import AsyncIterator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from accounts.application.dtos.user import UserRecord
from accounts.domain.enums import Role
from accounts.domain.exceptions import ConcurrentModificationException, ValidationException
from accounts.infrastructure.persistence.database import Base
from accounts.infrastructure.persistence.models import User  # noqa: F401  (registers table)
from accounts.infrastructure.persistence.repositories import UserRepository


@pytest.fixture
async def db_session(tmp_path) -> AsyncIterator[AsyncSession]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'repo.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


def _record(user_id: str = "u1", email: str = "a@x.com") -> UserRecord:
    return UserRecord(
        id=user_id,
        email=email,
        hashed_password="hash",
        first_name="Alice",
        roles=[Role.USER],
    )


@pytest.mark.requires_db
async def test_add_and_get_by_id_and_email(db_session) -> None:
    """Insert a user then read it back by id and by email."""
    repo = UserRepository(db_session)
    created = await repo.add(_record())
    assert created.version == 1
    assert created.created_at is not None
    assert created.roles == [Role.USER]

    by_id = await repo.get_by_id("u1")
    by_email = await repo.get_by_email("a@x.com")
    assert by_id is not None and by_email is not None
    assert by_id.id == by_email.id == "u1"
    assert by_id.first_name == "Alice"


@pytest.mark.requires_db
async def test_missing_user_returns_none(db_session) -> None:
    repo = UserRepository(db_session)
    assert await repo.get_by_id("nope") is None
    assert await repo.get_by_email("nope@x.com") is None


@pytest.mark.requires_db
async def test_duplicate_email_rejected(db_session) -> None:
    repo = UserRepository(db_session)
    await repo.add(_record())
    with pytest.raises(ValidationException):
        await repo.add(_record(user_id="u2"))


@pytest.mark.requires_db
async def test_list_all(db_session) -> None:
    repo = UserRepository(db_session)
    await repo.add(_record("u1", "a@x.com"))
    await repo.add(_record("u2", "b@x.com"))
    users = await repo.list_all()
    assert {u.id for u in users} == {"u1", "u2"}


@pytest.mark.requires_db
async def test_update_bumps_version(db_session) -> None:
    """Update writes the changed field and increments version."""
    repo = UserRepository(db_session)
    user = await repo.add(_record())
    user.avatar = "pic.png"
    updated = await repo.update(user)
    assert updated.version == 2
    assert updated.avatar == "pic.png"
    assert updated.first_name == "Alice"


@pytest.mark.requires_db
async def test_stale_update_is_rejected(db_session) -> None:
    """Two writers read version 1; the second write loses."""
    repo = UserRepository(db_session)
    await repo.add(_record())
    first = await repo.get_by_id("u1")
    second = await repo.get_by_id("u1")
    assert first is not None and second is not None

    first.first_name = "One"
    await repo.update(first)
    second.first_name = "Two"
    with pytest.raises(ConcurrentModificationException):
        await repo.update(second)
    current = await repo.get_by_id("u1")
    assert current is not None
    assert current.first_name == "One"


@pytest.mark.requires_db
async def test_delete(db_session) -> None:
    repo = UserRepository(db_session)
    await repo.add(_record())
    assert await repo.delete("u1") is True
    assert await repo.get_by_id("u1") is None
    assert await repo.delete("u1") is False
