"""Authorization gate: role rules per operation, evaluated from a single lookup table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from accounts.application.dtos.user import Caller
from accounts.domain.enums import Role
from accounts.domain.exceptions import AuthenticationException, AuthorizationException


@dataclass(frozen=True)
class RequireAuthenticated:
    """Any resolved caller passes."""


@dataclass(frozen=True)
class RequireRole:
    """Caller must hold role."""

    role: Role


@dataclass(frozen=True)
class RequireAnyRole:
    """Caller must hold at least one of roles."""

    roles: frozenset[Role]

    @classmethod
    def of(cls, *roles: Role) -> "RequireAnyRole":
        return cls(frozenset(roles))


Rule = Union[RequireAuthenticated, RequireRole, RequireAnyRole]

# Operation names match UserService method names.
OPERATION_RULES: dict[str, Rule] = {
    "list_users": RequireRole(Role.ADMIN),
    "get_current_user": RequireAuthenticated(),
    "get_user": RequireAnyRole.of(Role.ADMIN, Role.USER),
    "update_user": RequireAnyRole.of(Role.ADMIN, Role.USER),
    "update_password": RequireAnyRole.of(Role.ADMIN, Role.USER),
    "delete_user": RequireRole(Role.ADMIN),
    "update_picture": RequireAnyRole.of(Role.ADMIN, Role.USER),
    "get_picture": RequireAnyRole.of(Role.ADMIN, Role.USER),
}


class AuthorizationGate:
    """Decides whether a caller may invoke an operation. Stateless; no side effects."""

    resource = "user"

    def __init__(self, rules: dict[str, Rule] | None = None) -> None:
        self.rules = OPERATION_RULES if rules is None else rules

    @staticmethod
    def permit(caller: Caller | None, rule: Rule) -> bool:
        """Return True if caller satisfies rule. A missing caller never passes."""
        if caller is None:
            return False
        if isinstance(rule, RequireAuthenticated):
            return True
        if isinstance(rule, RequireRole):
            return caller.has_role(rule.role)
        if isinstance(rule, RequireAnyRole):
            return caller.has_any_role(*rule.roles)
        return False

    def require(self, caller: Caller | None, operation: str) -> Caller:
        """Return caller if the operation's rule permits it.

        Raises:
            AuthenticationException: No caller identity.
            AuthorizationException: Caller lacks the role, or the operation has no rule.
        """
        if caller is None:
            raise AuthenticationException("Not authenticated")
        rule = self.rules.get(operation)
        if rule is None or not self.permit(caller, rule):
            raise AuthorizationException(resource=self.resource, action=operation)
        return caller

    def require_owner_or_admin(
        self, caller: Caller, user_id: str, operation: str
    ) -> None:
        """Raise AuthorizationException unless caller is user_id itself or an ADMIN."""
        if caller.id == user_id or caller.has_role(Role.ADMIN):
            return
        raise AuthorizationException(resource=self.resource, action=operation)
