"""User application service: authorization-gated reads and mutations of user accounts.

Every operation takes the resolved Caller explicitly and asks the
AuthorizationGate before touching the user store or the file store.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from typing import Any, BinaryIO

from accounts.application.dtos.user import Caller, StoredFile, UserRecord
from accounts.application.interfaces.repositories import IUserStore
from accounts.application.interfaces.services import IPasswordHasher
from accounts.application.interfaces.storage import IFileStore
from accounts.application.services.authorization_service import AuthorizationGate
from accounts.domain.enums import PictureAction
from accounts.domain.exceptions import (
    ConcurrentModificationException,
    PasswordMismatchException,
    ResourceNotFoundException,
    ValidationException,
)
from accounts.infrastructure.exceptions import (
    StorageDeleteError,
    StorageException,
    StorageNotFoundError,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"first_name", "last_name", "gender", "timezone", "avatar"}
)

# Writes attempted to clear an avatar whose file was already deleted.
CLEAR_AVATAR_ATTEMPTS = 3


@dataclass(frozen=True)
class PictureUpload:
    """Uploaded picture as received from the transport layer."""

    file_data: BinaryIO
    filename: str
    content_type: str


def _require_non_blank(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise ValidationException("This field is required", field=field)
    return value


def _parse_action(action: str | None) -> PictureAction:
    """Map the raw action code to PictureAction; anything but exactly 'u' or 'd' is rejected."""
    if action is None or not action.strip():
        raise ValidationException("This field is required", field="action")
    if len(action) > 1:
        raise ValidationException(
            "This field length can't be greater than 1", field="action"
        )
    try:
        return PictureAction(action)
    except ValueError as e:
        raise ValidationException(
            'The valid value can be "u" or "d"', field="action"
        ) from e


class UserService:
    """List, read, update, delete users; change passwords; manage profile pictures."""

    def __init__(
        self,
        user_store: IUserStore,
        file_store: IFileStore,
        password_hasher: IPasswordHasher,
        gate: AuthorizationGate | None = None,
        allowed_content_types: frozenset[str] = frozenset(),
    ) -> None:
        self._users = user_store
        self._files = file_store
        self._hasher = password_hasher
        self._gate = gate or AuthorizationGate()
        self._allowed_content_types = allowed_content_types

    async def _get_or_404(self, user_id: str) -> UserRecord:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        return user

    async def _apply_changes(
        self, user: UserRecord, changes: Mapping[str, Any]
    ) -> UserRecord:
        """Set only the given fields and persist. No write when changes is empty."""
        if not changes:
            return user
        for name, value in changes.items():
            setattr(user, name, value)
        return await self._users.update(user)

    # ---- Reads ----

    async def list_users(self, caller: Caller | None) -> list[UserRecord]:
        self._gate.require(caller, "list_users")
        return await self._users.list_all()

    async def get_current_user(self, caller: Caller | None) -> UserRecord:
        """Return the record matching the caller's own email."""
        caller = self._gate.require(caller, "get_current_user")
        user = await self._users.get_by_email(caller.email)
        if user is None:
            raise ResourceNotFoundException("user", caller.email)
        return user

    async def get_user(self, caller: Caller | None, user_id: str) -> UserRecord:
        self._gate.require(caller, "get_user")
        return await self._get_or_404(user_id)

    # ---- Mutations ----

    async def update_user(
        self,
        caller: Caller | None,
        user_id: str,
        changes: Mapping[str, Any],
    ) -> UserRecord:
        """Apply a sparse update; fields absent from changes are left untouched.

        Raises:
            ResourceNotFoundException: No user with user_id.
            ValidationException: Unknown field, or avatar set to a reference other
                than the user's current one (new pictures go through update_picture).
        """
        self._gate.require(caller, "update_user")
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Unknown fields: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        user = await self._get_or_404(user_id)
        avatar = changes.get("avatar")
        if avatar is not None and avatar != user.avatar:
            raise ValidationException(
                "Pictures can only be changed through the picture endpoint",
                field="avatar",
            )
        return await self._apply_changes(user, changes)

    async def update_password(
        self,
        caller: Caller | None,
        user_id: str,
        current_password: str,
        new_password: str,
    ) -> UserRecord:
        """Replace the password after verifying the current one.

        Nothing is written unless verification succeeds.

        Raises:
            ValidationException: Blank current or new password.
            ResourceNotFoundException: No user with user_id.
            PasswordMismatchException: current_password does not verify.
        """
        self._gate.require(caller, "update_password")
        _require_non_blank(current_password, "current_password")
        _require_non_blank(new_password, "new_password")
        user = await self._get_or_404(user_id)
        matches = await asyncio.to_thread(
            self._hasher.verify_password, current_password, user.hashed_password
        )
        if not matches:
            logger.warning(
                "Password change rejected for user %s: current password mismatch",
                user_id,
            )
            raise PasswordMismatchException(user_id)
        user.hashed_password = await asyncio.to_thread(
            self._hasher.hash_password, new_password
        )
        return await self._users.update(user)

    async def delete_user(self, caller: Caller | None, user_id: str) -> None:
        """Delete the user record, then its picture (best effort).

        Raises:
            ResourceNotFoundException: No user with user_id.
        """
        self._gate.require(caller, "delete_user")
        user = await self._get_or_404(user_id)
        if not await self._users.delete(user_id):
            raise ResourceNotFoundException("user", user_id)
        if user.avatar:
            await self._discard(user.avatar)

    # ---- Picture ----

    async def update_picture(
        self,
        caller: Caller | None,
        user_id: str,
        action: str | None,
        upload: PictureUpload | None = None,
    ) -> UserRecord:
        """Upload ('u') or delete ('d') the user's picture.

        Raises:
            ValidationException: Bad action code, missing file, or disallowed content type.
            ResourceNotFoundException: No user with user_id.
            StorageException: The file could not be stored or deleted.
        """
        caller = self._gate.require(caller, "update_picture")
        self._gate.require_owner_or_admin(caller, user_id, "update_picture")
        parsed = _parse_action(action)
        if parsed is PictureAction.UPLOAD:
            return await self._upload_picture(user_id, upload)
        if parsed is PictureAction.DELETE:
            return await self._delete_picture(user_id)
        logger.warning("Unknown picture action %r for user %s", action, user_id)
        raise ValidationException(
            'The valid value can be "u" or "d"', field="action"
        )

    async def _upload_picture(
        self, user_id: str, upload: PictureUpload | None
    ) -> UserRecord:
        if upload is None:
            raise ValidationException(
                "A file is required to upload a picture", field="file"
            )
        content_type = (upload.content_type or "").lower()
        allowed = self._allowed_content_types
        if allowed and content_type not in allowed:
            raise ValidationException(
                f"Unsupported picture type: {upload.content_type}", field="file"
            )
        user = await self._get_or_404(user_id)
        previous = user.avatar
        reference = await self._files.store(
            upload.file_data, upload.filename, content_type
        )
        try:
            updated = await self._apply_changes(user, {"avatar": reference})
        except Exception:
            await self._discard(reference)
            raise
        if previous and previous != reference:
            await self._discard(previous)
        return updated

    async def _delete_picture(self, user_id: str) -> UserRecord:
        user = await self._get_or_404(user_id)
        if user.avatar is None:
            return user
        reference = user.avatar
        try:
            deleted = await self._files.delete(reference)
        except StorageException:
            logger.warning(
                "Picture %s of user %s could not be deleted", reference, user_id
            )
            raise
        if not deleted:
            logger.warning(
                "Picture %s of user %s is missing from storage", reference, user_id
            )
            raise StorageDeleteError(reference, "file not found")
        return await self._clear_avatar(user, reference)

    async def _clear_avatar(self, user: UserRecord, reference: str) -> UserRecord:
        """Null the avatar once its file is gone; re-read the record on version conflicts.

        The file is already deleted, so a lost optimistic-lock race must not
        leave the avatar naming it.
        """
        for attempt in range(1, CLEAR_AVATAR_ATTEMPTS + 1):
            if user.avatar != reference:
                return user
            user.avatar = None
            try:
                return await self._users.update(user)
            except ConcurrentModificationException:
                if attempt == CLEAR_AVATAR_ATTEMPTS:
                    logger.error(
                        "Avatar of user %s still names deleted picture %s",
                        user.id,
                        reference,
                    )
                    raise
                logger.info(
                    "Retrying avatar clear for user %s after concurrent update",
                    user.id,
                )
                user = await self._get_or_404(user.id)
        return user

    async def _discard(self, reference: str) -> None:
        """Delete a file the user record no longer points at; failures are only logged."""
        try:
            await self._files.delete(reference)
        except StorageException as e:
            logger.warning(
                "Orphaned picture %s left in storage: %s", reference, e.message
            )

    async def get_picture(
        self, caller: Caller | None, user_id: str
    ) -> tuple[StoredFile, AsyncIterator[bytes]]:
        """Return picture metadata and a content stream.

        Raises:
            ResourceNotFoundException: No user, no picture, or picture file missing.
        """
        self._gate.require(caller, "get_picture")
        user = await self._get_or_404(user_id)
        if user.avatar is None:
            raise ResourceNotFoundException("picture", user_id)
        try:
            stored = await self._files.load(user.avatar)
        except StorageNotFoundError as e:
            raise ResourceNotFoundException("picture", user_id) from e
        return stored, self._files.stream(user.avatar)
