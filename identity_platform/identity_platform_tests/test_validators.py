import pytest

from identity_platform.identity_platform.auth_service.schemas import (
    LoginRequest,
    RegistrationRequest,
    RoleAssignmentRequest,
)
from identity_platform.identity_platform.auth_service.validators import (
    is_valid_email,
    validate_login,
    validate_registration,
    validate_role_assignment,
)


def valid_registration(**overrides):
    data = {
        "username": "frank",
        "email": "frank@example.com",
        "password": "Secret123!",
        "first_name": "Frank",
        "last_name": "Ocean",
    }
    data.update(overrides)
    return RegistrationRequest(**data)


def test_valid_registration_has_no_errors():
    assert validate_registration(valid_registration()) == []


def test_registration_reports_every_missing_field():
    errors = validate_registration(RegistrationRequest())

    assert [e.field for e in errors] == ["first_name", "last_name", "username", "email", "password"]
    assert errors[2].message == "The Username field is required."


def test_registration_blank_value_is_missing():
    errors = validate_registration(valid_registration(first_name="   "))
    assert [(e.field, e.message) for e in errors] == [("first_name", "The FirstName field is required.")]


def test_registration_max_lengths():
    errors = validate_registration(valid_registration(username="u" * 51, last_name="l" * 101))

    assert {e.field: e.message for e in errors} == {
        "last_name": "The field LastName must be a string with a maximum length of 100.",
        "username": "The field Username must be a string with a maximum length of 50.",
    }


def test_registration_email_format():
    errors = validate_registration(valid_registration(email="frank.example.com"))
    assert [(e.field, e.message) for e in errors] == [
        ("email", "The Email field is not a valid e-mail address.")
    ]


def test_is_valid_email():
    assert is_valid_email("a@b.co")
    assert is_valid_email("Frank.Ocean@Example.com")
    assert not is_valid_email("a@b")
    assert not is_valid_email("a b@c.com")
    assert not is_valid_email("a@@c.com")
    assert not is_valid_email("Frank <frank@example.com>")


@pytest.mark.parametrize("email", [
    "bob@example..com",
    "bob@.example.com",
    "bob@example.com.",
    "<bob>@x.y",
])
def test_registration_rejects_malformed_email(email):
    errors = validate_registration(valid_registration(email=email))
    assert [(e.field, e.message) for e in errors] == [
        ("email", "The Email field is not a valid e-mail address.")
    ]


def test_login_requires_both_fields():
    assert validate_login(LoginRequest(email="a@b.co", password="x")) == []
    assert [e.field for e in validate_login(LoginRequest())] == ["email", "password"]


def test_role_assignment_requires_both_fields():
    assert validate_role_assignment(RoleAssignmentRequest(user_id="1", role="Admin")) == []
    errors = validate_role_assignment(RoleAssignmentRequest(user_id="1"))
    assert [(e.field, e.message) for e in errors] == [("role", "The Role field is required.")]
