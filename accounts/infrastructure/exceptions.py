"""Infrastructure exceptions for picture storage.

Storage errors extend AccountsException so presentation can map them
to HTTP responses consistently (all STORAGE_* codes are client errors).
"""

from accounts.domain.exceptions import AccountsException


class StorageException(AccountsException):
    """Base exception for storage operations."""


class StorageNotFoundError(StorageException):
    """File not found in storage."""

    def __init__(self, reference: str) -> None:
        super().__init__(
            f"File not found: {reference}",
            "STORAGE_NOT_FOUND",
            {"reference": reference},
        )


class StorageUploadError(StorageException):
    """File could not be written."""

    def __init__(self, reference: str, reason: str) -> None:
        super().__init__(
            f"Failed to store file: {reference}",
            "STORAGE_UPLOAD_ERROR",
            {"reference": reference, "reason": reason},
        )


class StorageReadError(StorageException):
    """File could not be read."""

    def __init__(self, reference: str, reason: str) -> None:
        super().__init__(
            f"Failed to read file: {reference}",
            "STORAGE_READ_ERROR",
            {"reference": reference, "reason": reason},
        )


class StorageDeleteError(StorageException):
    """File could not be deleted."""

    def __init__(self, reference: str, reason: str) -> None:
        super().__init__(
            f"Failed to delete file: {reference}",
            "STORAGE_DELETE_ERROR",
            {"reference": reference, "reason": reason},
        )


class StoragePermissionError(StorageException):
    """Reference resolves outside the storage root."""

    def __init__(self, reference: str, operation: str) -> None:
        super().__init__(
            f"Permission denied for {operation} on {reference}",
            "STORAGE_PERMISSION_ERROR",
            {"reference": reference, "operation": operation},
        )


class StorageQuotaExceededError(StorageException):
    """Uploaded file is larger than the configured maximum."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"File too large: {size}/{limit} bytes",
            "STORAGE_QUOTA_EXCEEDED",
            {"size": size, "limit": limit},
        )
