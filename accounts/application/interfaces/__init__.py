"""Ports implemented by the infrastructure layer."""

from accounts.application.interfaces.repositories import IUserStore
from accounts.application.interfaces.services import IPasswordHasher
from accounts.application.interfaces.storage import IFileStore

__all__ = ["IFileStore", "IPasswordHasher", "IUserStore"]
