"""Repositories (IUserStore implementation)."""

from accounts.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = ["UserRepository"]
