"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, stores, and the user service.
Routes depend only on these dependencies, not on infrastructure directly.
Tests swap stores via app.dependency_overrides.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.application.dtos.user import Caller
from accounts.application.interfaces.repositories import IUserStore
from accounts.application.interfaces.services import IPasswordHasher
from accounts.application.interfaces.storage import IFileStore
from accounts.application.services.authorization_service import AuthorizationGate
from accounts.application.services.user_service import UserService
from accounts.core.config import get_settings
from accounts.domain.enums import Role
from accounts.infrastructure.external.storage.local_storage import LocalFileStore
from accounts.infrastructure.persistence.database import get_db, get_db_transactional
from accounts.infrastructure.persistence.repositories.user_repo import UserRepository
from accounts.infrastructure.security.jwt import verify_token
from accounts.infrastructure.security.password import BcryptPasswordHasher

logger = logging.getLogger(__name__)

_http_bearer = HTTPBearer(auto_error=False)
_gate = AuthorizationGate()


def caller_from_claims(payload: dict) -> Caller:
    """Build a Caller from decoded token claims.

    Unknown role names are ignored; a roles claim that is neither a string nor
    a list means no roles.
    """
    raw_roles = payload.get("roles") or []
    if isinstance(raw_roles, str):
        raw_roles = [raw_roles]
    elif not isinstance(raw_roles, (list, tuple)):
        logger.info("Ignoring malformed roles claim of type %s", type(raw_roles).__name__)
        raw_roles = []
    roles = frozenset(
        r for r in (Role.parse(str(name)) for name in raw_roles) if r is not None
    )
    return Caller(id=str(payload["sub"]), email=str(payload["email"]), roles=roles)


async def get_current_caller(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> Caller | None:
    """Return the caller from the bearer JWT, or None when absent or invalid.

    The authorization gate turns None into 401 for operations that need a caller.
    """
    if not credentials:
        return None
    try:
        return caller_from_claims(verify_token(credentials.credentials))
    except ValueError as e:
        logger.info("Rejected bearer token: %s", e)
        return None


def get_file_store() -> IFileStore:
    """Picture store (local filesystem) from settings."""
    settings = get_settings()
    return LocalFileStore(
        storage_root=settings.storage_root,
        max_size=settings.max_upload_size,
    )


def get_password_hasher() -> IPasswordHasher:
    """Password hashing/verification (composition root)."""
    return BcryptPasswordHasher()


async def get_user_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> IUserStore:
    """User store for read operations."""
    return UserRepository(db)


async def get_user_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> IUserStore:
    """User store for writes (one transaction per request)."""
    return UserRepository(db)


def _build_user_service(
    user_store: IUserStore,
    file_store: IFileStore,
    password_hasher: IPasswordHasher,
) -> UserService:
    return UserService(
        user_store=user_store,
        file_store=file_store,
        password_hasher=password_hasher,
        gate=_gate,
        allowed_content_types=get_settings().allowed_image_type_set,
    )


def get_user_service(
    user_store: Annotated[IUserStore, Depends(get_user_repo)],
    file_store: Annotated[IFileStore, Depends(get_file_store)],
    password_hasher: Annotated[IPasswordHasher, Depends(get_password_hasher)],
) -> UserService:
    """User service for read endpoints."""
    return _build_user_service(user_store, file_store, password_hasher)


def get_user_service_for_write(
    user_store: Annotated[IUserStore, Depends(get_user_repo_for_write)],
    file_store: Annotated[IFileStore, Depends(get_file_store)],
    password_hasher: Annotated[IPasswordHasher, Depends(get_password_hasher)],
) -> UserService:
    """User service for mutating endpoints."""
    return _build_user_service(user_store, file_store, password_hasher)
