"""Local filesystem picture store with path validation and atomic writes."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any, BinaryIO

import aiofiles
import aiofiles.os

from accounts.application.dtos.user import StoredFile
from accounts.infrastructure.exceptions import (
    StorageDeleteError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageQuotaExceededError,
    StorageReadError,
    StorageUploadError,
)
from accounts.shared.utils.datetime import utc_now
from accounts.shared.utils.generators import generate_cuid

_MAX_NAME_LENGTH = 100


def _sanitize_filename(filename: str) -> str:
    """Strip path separators and dangerous characters from filename."""
    name = os.path.basename(filename.replace("\\", "/"))
    name = name.replace("\x00", "").strip(". ")
    if not name or ".." in name:
        raise ValueError("Filename is empty or invalid after sanitization")
    return name[-_MAX_NAME_LENGTH:]


class LocalFileStore:
    """Local filesystem store for profile pictures.

    References are flat names ('<cuid>_<filename>') under storage_root and are
    validated against it. Writes use temp file + rename. Content type is kept
    in a .meta.json sidecar.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(self, storage_root: str, max_size: int | None = None) -> None:
        """Initialize local storage.

        Args:
            storage_root: Base directory for all files.
            max_size: Optional upper bound in bytes for stored files.
        """
        self.storage_root = Path(storage_root).resolve()
        self.max_size = max_size
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _get_full_path(self, reference: str) -> Path:
        """Resolve and validate path under storage_root. Raises StoragePermissionError if traversal."""
        full_path = (self.storage_root / reference).resolve()
        try:
            full_path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError(reference, "path_validation") from e
        if full_path == self.storage_root:
            raise StoragePermissionError(reference, "path_validation")
        return full_path

    @staticmethod
    def _meta_path(file_path: Path) -> Path:
        return file_path.with_suffix(file_path.suffix + ".meta.json")

    async def _write_metadata(self, file_path: Path, metadata: dict[str, Any]) -> None:
        async with aiofiles.open(self._meta_path(file_path), "w") as f:
            await f.write(json.dumps(metadata, indent=2))

    async def _read_metadata(self, file_path: Path) -> dict[str, Any]:
        meta_path = self._meta_path(file_path)
        if not meta_path.exists():
            return {}
        async with aiofiles.open(meta_path, "r") as f:
            result = json.loads(await f.read())
        return result if isinstance(result, dict) else {}

    async def store(
        self,
        file_data: BinaryIO,
        filename: str,
        content_type: str,
    ) -> str:
        """Write file under a new unique reference and return the reference."""
        try:
            reference = f"{generate_cuid()}_{_sanitize_filename(filename)}"
        except ValueError as e:
            raise StorageUploadError(filename, str(e)) from e
        target_path = self._get_full_path(reference)
        content = file_data.read()
        if self.max_size is not None and len(content) > self.max_size:
            raise StorageQuotaExceededError(len(content), self.max_size)

        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.storage_root, prefix=".tmp_", suffix=target_path.suffix
        )
        os.close(temp_fd)
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(content)
            os.replace(temp_path, target_path)
            await self._write_metadata(
                target_path,
                {
                    "reference": reference,
                    "original_filename": filename,
                    "content_type": content_type,
                    "size": len(content),
                    "uploaded_at": utc_now().isoformat(),
                },
            )
        except OSError as e:
            raise StorageUploadError(reference, str(e)) from e
        finally:
            if Path(temp_path).exists():
                os.unlink(temp_path)
        return reference

    async def load(self, reference: str) -> StoredFile:
        """Return reference, content type, and size for a stored file."""
        file_path = self._get_full_path(reference)
        if not file_path.is_file():
            raise StorageNotFoundError(reference)
        try:
            meta = await self._read_metadata(file_path)
            size = file_path.stat().st_size
        except (OSError, ValueError) as e:
            raise StorageReadError(reference, str(e)) from e
        return StoredFile(
            reference=reference,
            content_type=meta.get("content_type", "application/octet-stream"),
            size=size,
        )

    async def stream(self, reference: str) -> AsyncIterator[bytes]:
        """Stream file content."""
        file_path = self._get_full_path(reference)
        if not file_path.is_file():
            raise StorageNotFoundError(reference)
        try:
            async with aiofiles.open(file_path, "rb") as f:
                while chunk := await f.read(self.CHUNK_SIZE):
                    yield chunk
        except OSError as e:
            raise StorageReadError(reference, str(e)) from e

    async def delete(self, reference: str) -> bool:
        """Delete file and metadata. Returns True if deleted, False if not found."""
        file_path = self._get_full_path(reference)
        if not file_path.is_file():
            return False
        try:
            await aiofiles.os.remove(file_path)
            meta_path = self._meta_path(file_path)
            if meta_path.exists():
                await aiofiles.os.remove(meta_path)
        except OSError as e:
            raise StorageDeleteError(reference, str(e)) from e
        return True

    async def exists(self, reference: str) -> bool:
        """Return True if file exists; invalid references do not exist."""
        try:
            return self._get_full_path(reference).is_file()
        except StoragePermissionError:
            return False
