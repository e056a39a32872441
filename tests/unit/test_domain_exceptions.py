"""Tests for domain exception payloads."""

from accounts.domain.exceptions import (
    AccountsException,
    AuthorizationException,
    PasswordMismatchException,
    ResourceNotFoundException,
    ValidationException,
)
from accounts.infrastructure.exceptions import StorageDeleteError, StorageException


def test_error_code_defaults_to_class_name() -> None:
    assert AccountsException("boom").error_code == "AccountsException"


def test_to_dict_shape() -> None:
    body = ResourceNotFoundException("user", "u9").to_dict()
    assert body == {
        "error": "RESOURCE_NOT_FOUND",
        "message": "user not found: u9",
        "details": {"resource_type": "user", "resource_id": "u9"},
    }


def test_validation_without_field_has_no_details() -> None:
    assert ValidationException("bad").details == {}
    assert ValidationException("bad", field="action").details == {"field": "action"}


def test_authorization_message_names_action() -> None:
    exc = AuthorizationException(resource="user", action="delete_user")
    assert exc.message == "Permission denied: delete_user on user"
    assert AuthorizationException().message == "Permission denied"


def test_password_mismatch_code() -> None:
    assert PasswordMismatchException("u1").error_code == "PASSWORD_MISMATCH"


def test_storage_errors_are_accounts_errors() -> None:
    exc = StorageDeleteError("pic.png", "file not found")
    assert isinstance(exc, StorageException)
    assert isinstance(exc, AccountsException)
    assert exc.details == {"reference": "pic.png", "reason": "file not found"}
