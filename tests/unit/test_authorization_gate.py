"""Tests for AuthorizationGate (rule evaluation and the operation table)."""

import pytest

from accounts.application.dtos.user import Caller
from accounts.application.services.authorization_service import (
    OPERATION_RULES,
    AuthorizationGate,
    RequireAnyRole,
    RequireAuthenticated,
    RequireRole,
)
from accounts.domain.enums import Role
from accounts.domain.exceptions import AuthenticationException, AuthorizationException

ADMIN = Caller(id="a", email="admin@x.com", roles=frozenset({Role.ADMIN}))
USER = Caller(id="u", email="user@x.com", roles=frozenset({Role.USER}))
NO_ROLES = Caller(id="n", email="nobody@x.com")


class TestPermit:
    """permit() evaluates one rule against one caller."""

    def test_require_authenticated_accepts_any_caller(self) -> None:
        assert AuthorizationGate.permit(NO_ROLES, RequireAuthenticated())

    def test_require_authenticated_rejects_missing_caller(self) -> None:
        assert not AuthorizationGate.permit(None, RequireAuthenticated())

    def test_require_role(self) -> None:
        rule = RequireRole(Role.ADMIN)
        assert AuthorizationGate.permit(ADMIN, rule)
        assert not AuthorizationGate.permit(USER, rule)

    def test_require_any_role(self) -> None:
        rule = RequireAnyRole.of(Role.ADMIN, Role.USER)
        assert AuthorizationGate.permit(ADMIN, rule)
        assert AuthorizationGate.permit(USER, rule)
        assert not AuthorizationGate.permit(NO_ROLES, rule)


class TestRequire:
    """require() looks the operation up in the table and raises on denial."""

    def test_missing_caller_is_unauthenticated(self) -> None:
        with pytest.raises(AuthenticationException):
            AuthorizationGate().require(None, "get_current_user")

    @pytest.mark.parametrize("operation", ["list_users", "delete_user"])
    def test_admin_only_operations_reject_user(self, operation: str) -> None:
        with pytest.raises(AuthorizationException) as exc_info:
            AuthorizationGate().require(USER, operation)
        assert exc_info.value.details == {"resource": "user", "action": operation}

    @pytest.mark.parametrize("operation", sorted(OPERATION_RULES))
    def test_admin_passes_every_operation(self, operation: str) -> None:
        assert AuthorizationGate().require(ADMIN, operation) is ADMIN

    def test_caller_without_roles_only_reaches_current_user(self) -> None:
        gate = AuthorizationGate()
        assert gate.require(NO_ROLES, "get_current_user") is NO_ROLES
        with pytest.raises(AuthorizationException):
            gate.require(NO_ROLES, "get_user")

    def test_unknown_operation_is_denied(self) -> None:
        with pytest.raises(AuthorizationException):
            AuthorizationGate().require(ADMIN, "drop_everything")

    def test_picture_operation_has_a_rule(self) -> None:
        assert OPERATION_RULES["update_picture"] == RequireAnyRole.of(Role.ADMIN, Role.USER)


class TestOwnerOrAdmin:
    def test_owner_passes(self) -> None:
        AuthorizationGate().require_owner_or_admin(USER, "u", "update_picture")

    def test_admin_passes_for_other_user(self) -> None:
        AuthorizationGate().require_owner_or_admin(ADMIN, "u", "update_picture")

    def test_other_user_is_denied(self) -> None:
        with pytest.raises(AuthorizationException):
            AuthorizationGate().require_owner_or_admin(USER, "someone-else", "update_picture")


def test_role_parse_accepts_prefix_and_case() -> None:
    assert Role.parse("ROLE_ADMIN") is Role.ADMIN
    assert Role.parse("user") is Role.USER
    assert Role.parse("ROLE_SUPERUSER") is None
