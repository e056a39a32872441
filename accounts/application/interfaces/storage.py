"""File store protocol (DIP). Implementation: LocalFileStore."""

from collections.abc import AsyncIterator
from typing import BinaryIO, Protocol

from accounts.application.dtos.user import StoredFile


class IFileStore(Protocol):
    """Protocol for picture storage backends."""

    async def store(
        self,
        file_data: BinaryIO,
        filename: str,
        content_type: str,
    ) -> str:
        """Persist file and return its reference name. Raises StorageUploadError on I/O failure."""
        ...

    async def load(self, reference: str) -> StoredFile:
        """Return metadata for reference. Raises StorageNotFoundError if missing."""
        ...

    def stream(self, reference: str) -> AsyncIterator[bytes]:
        """Stream file content. Raises StorageNotFoundError if missing."""
        ...

    async def delete(self, reference: str) -> bool:
        """Delete file. Returns True if deleted, False if not found."""
        ...

    async def exists(self, reference: str) -> bool:
        """Return True if file exists."""
        ...
