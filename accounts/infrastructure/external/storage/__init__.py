"""Picture storage backends."""

from accounts.infrastructure.external.storage.local_storage import LocalFileStore

__all__ = ["LocalFileStore"]
