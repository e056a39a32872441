"""Application DTOs (no ORM or HTTP types)."""

from accounts.application.dtos.user import Caller, StoredFile, UserRecord

__all__ = ["Caller", "StoredFile", "UserRecord"]
