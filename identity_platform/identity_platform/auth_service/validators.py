"""
Request validation run by the API layer before a request reaches AuthService.

Each validate_* function returns a list of FieldError; an empty list means
the request is well-formed.
"""
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from .schemas import FieldError, LoginRequest, RegistrationRequest, RoleAssignmentRequest

# (attribute, display name, max length)
REGISTRATION_FIELDS = (
    ("first_name", "FirstName", 100),
    ("last_name", "LastName", 100),
    ("username", "Username", 50),
    ("email", "Email", 128),
    ("password", "Password", 256),
)
LOGIN_FIELDS = (
    ("email", "Email", None),
    ("password", "Password", None),
)
ROLE_ASSIGNMENT_FIELDS = (
    ("user_id", "UserId", None),
    ("role", "Role", None),
)


def _check_fields(
    request: BaseModel, fields: Iterable[Tuple[str, str, Optional[int]]]
) -> List[FieldError]:
    errors = []
    for attr, display, max_length in fields:
        value = getattr(request, attr)
        if value is None or not value.strip():
            errors.append(FieldError(field=attr, message=f"The {display} field is required."))
        elif max_length is not None and len(value) > max_length:
            errors.append(FieldError(
                field=attr,
                message=f"The field {display} must be a string with a maximum length of {max_length}.",
            ))
    return errors


def is_valid_email(value: str) -> bool:
    try:
        _, email = validate_email(value)
    except PydanticCustomError:
        return False
    # "Name <address>" parses too, but only a bare address is accepted
    return email.lower() == value.lower()


def validate_registration(request: RegistrationRequest) -> List[FieldError]:
    errors = _check_fields(request, REGISTRATION_FIELDS)
    if request.email and not any(e.field == "email" for e in errors) and not is_valid_email(request.email):
        errors.append(FieldError(field="email", message="The Email field is not a valid e-mail address."))
    return errors


def validate_login(request: LoginRequest) -> List[FieldError]:
    return _check_fields(request, LOGIN_FIELDS)


def validate_role_assignment(request: RoleAssignmentRequest) -> List[FieldError]:
    return _check_fields(request, ROLE_ASSIGNMENT_FIELDS)
