"""Domain enumerations for the accounts service.

Enums represent fixed sets of domain values (roles, picture actions).
"""

from enum import Enum


class Role(str, Enum):
    """Coarse permission tag attached to a caller and stored on a user."""

    ADMIN = "ADMIN"
    USER = "USER"

    @classmethod
    def parse(cls, raw: str) -> "Role | None":
        """Return the Role for raw (case-insensitive, optional ROLE_ prefix); None if unknown.

        Args:
            raw: Role name as found in a token or database row (e.g. 'ROLE_ADMIN', 'user').

        Returns:
            Matching Role or None.
        """
        name = raw.strip().upper()
        if name.startswith("ROLE_"):
            name = name[len("ROLE_") :]
        try:
            return cls(name)
        except ValueError:
            return None


class PictureAction(str, Enum):
    """Action code accepted by the picture endpoint."""

    UPLOAD = "u"
    DELETE = "d"
