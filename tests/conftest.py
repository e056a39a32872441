"""Pytest configuration and fixtures for the accounts service.

Environment is set before accounts.main is imported (settings are read in
create_app). HTTP tests use accounts.main:app with dependency_overrides that
plug in the in-memory stores below; repository tests use a sqlite file.
"""

import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="accounts-tests-")
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP}/test.db")
os.environ.setdefault("STORAGE_ROOT", os.path.join(_TMP, "uploads"))
os.environ["RATE_LIMIT_ENABLED"] = "false"

from collections.abc import AsyncIterator  # noqa: E402
from dataclasses import replace  # noqa: E402
from typing import BinaryIO  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from accounts.api.v1.dependencies import (  # noqa: E402
    get_file_store,
    get_password_hasher,
    get_user_repo,
    get_user_repo_for_write,
)
from accounts.application.dtos.user import Caller, StoredFile, UserRecord  # noqa: E402
from accounts.application.services.user_service import UserService  # noqa: E402
from accounts.core.config import get_settings  # noqa: E402
from accounts.domain.enums import Role  # noqa: E402
from accounts.domain.exceptions import ConcurrentModificationException  # noqa: E402
from accounts.infrastructure.exceptions import (  # noqa: E402
    StorageDeleteError,
    StorageNotFoundError,
    StorageUploadError,
)
from accounts.infrastructure.security.jwt import create_access_token  # noqa: E402
from accounts.main import app  # noqa: E402


def _copy(user: UserRecord) -> UserRecord:
    return replace(user, roles=list(user.roles))


class InMemoryUserStore:
    """IUserStore over a dict; records are copied in and out like a real store."""

    def __init__(self) -> None:
        self.users: dict[str, UserRecord] = {}
        self.update_calls = 0
        self.delete_calls = 0

    def seed(self, user: UserRecord) -> UserRecord:
        self.users[user.id] = _copy(user)
        return _copy(user)

    async def list_all(self) -> list[UserRecord]:
        return [_copy(u) for u in self.users.values()]

    async def get_by_id(self, user_id: str) -> UserRecord | None:
        user = self.users.get(user_id)
        return _copy(user) if user else None

    async def get_by_email(self, email: str) -> UserRecord | None:
        for user in self.users.values():
            if user.email == email:
                return _copy(user)
        return None

    async def add(self, user: UserRecord) -> UserRecord:
        return self.seed(user)

    async def update(self, user: UserRecord) -> UserRecord:
        self.update_calls += 1
        current = self.users.get(user.id)
        if current is None or current.version != user.version:
            raise ConcurrentModificationException(user.id)
        stored = _copy(user)
        stored.version += 1
        self.users[user.id] = stored
        return _copy(stored)

    async def delete(self, user_id: str) -> bool:
        self.delete_calls += 1
        return self.users.pop(user_id, None) is not None


class FakeFileStore:
    """IFileStore in memory with switches to simulate I/O failures."""

    def __init__(self) -> None:
        self.files: dict[str, tuple[bytes, str]] = {}
        self.store_calls: list[str] = []
        self.delete_calls: list[str] = []
        self.fail_store = False
        self.fail_delete = False

    async def store(self, file_data: BinaryIO, filename: str, content_type: str) -> str:
        if self.fail_store:
            raise StorageUploadError(filename, "disk full")
        reference = f"{len(self.store_calls) + 1}_{filename}"
        self.store_calls.append(reference)
        self.files[reference] = (file_data.read(), content_type)
        return reference

    async def load(self, reference: str) -> StoredFile:
        if reference not in self.files:
            raise StorageNotFoundError(reference)
        content, content_type = self.files[reference]
        return StoredFile(reference=reference, content_type=content_type, size=len(content))

    async def stream(self, reference: str) -> AsyncIterator[bytes]:
        if reference not in self.files:
            raise StorageNotFoundError(reference)
        yield self.files[reference][0]

    async def delete(self, reference: str) -> bool:
        self.delete_calls.append(reference)
        if self.fail_delete:
            raise StorageDeleteError(reference, "permission denied")
        return self.files.pop(reference, None) is not None

    async def exists(self, reference: str) -> bool:
        return reference in self.files


class FakePasswordHasher:
    """Reversible hasher; enough to observe which password a record holds."""

    def hash_password(self, password: str) -> str:
        return f"hashed:{password}"

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return hashed_password == f"hashed:{plain_password}"


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def file_store() -> FakeFileStore:
    return FakeFileStore()


@pytest.fixture
def hasher() -> FakePasswordHasher:
    return FakePasswordHasher()


@pytest.fixture
def admin_user(user_store: InMemoryUserStore) -> UserRecord:
    return user_store.seed(
        UserRecord(
            id="admin1",
            email="admin@x.com",
            hashed_password="hashed:admin-pass",
            first_name="Ada",
            roles=[Role.ADMIN, Role.USER],
        )
    )


@pytest.fixture
def regular_user(user_store: InMemoryUserStore, file_store: FakeFileStore) -> UserRecord:
    file_store.files["pic1.png"] = (b"\x89PNG old", "image/png")
    return user_store.seed(
        UserRecord(
            id="u1",
            email="a@x.com",
            hashed_password="hashed:old-pass",
            first_name="Alice",
            last_name="Smith",
            timezone="Europe/Paris",
            avatar="pic1.png",
            roles=[Role.USER],
        )
    )


@pytest.fixture
def other_user(user_store: InMemoryUserStore) -> UserRecord:
    return user_store.seed(
        UserRecord(
            id="u2",
            email="b@x.com",
            hashed_password="hashed:b-pass",
            roles=[Role.USER],
        )
    )


def caller_for(user: UserRecord) -> Caller:
    return Caller(id=user.id, email=user.email, roles=frozenset(user.roles))


@pytest.fixture
def admin_caller(admin_user: UserRecord) -> Caller:
    return caller_for(admin_user)


@pytest.fixture
def user_caller(regular_user: UserRecord) -> Caller:
    return caller_for(regular_user)


@pytest.fixture
def service(
    user_store: InMemoryUserStore,
    file_store: FakeFileStore,
    hasher: FakePasswordHasher,
) -> UserService:
    return UserService(
        user_store=user_store,
        file_store=file_store,
        password_hasher=hasher,
        allowed_content_types=frozenset({"image/png", "image/jpeg"}),
    )


def _bearer(user: UserRecord, roles: list[str] | None = None) -> dict[str, str]:
    token = create_access_token(
        {
            "sub": user.id,
            "email": user.email,
            "roles": roles if roles is not None else [f"ROLE_{r.value}" for r in user.roles],
        }
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(
    user_store: InMemoryUserStore,
    file_store: FakeFileStore,
    hasher: FakePasswordHasher,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI) with in-memory stores."""
    get_settings.cache_clear()
    app.dependency_overrides[get_user_repo] = lambda: user_store
    app.dependency_overrides[get_user_repo_for_write] = lambda: user_store
    app.dependency_overrides[get_file_store] = lambda: file_store
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def other_caller(other_user: UserRecord) -> Caller:
    return caller_for(other_user)


@pytest.fixture
def auth_headers():
    """Factory: Authorization header with a token for user (roles default to the user's)."""
    return _bearer
