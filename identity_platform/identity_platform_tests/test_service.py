"""
Unit tests for AuthService against the in-memory credential store.
"""
from datetime import timedelta
from unittest.mock import Mock
import pytest

from identity_platform.identity_platform.auth_service.auth import TokenIssuer
from identity_platform.identity_platform.auth_service.config import SigningConfig
from identity_platform.identity_platform.auth_service.memory_store import InMemoryCredentialStore
from identity_platform.identity_platform.auth_service.schemas import (
    LoginRequest,
    RegistrationRequest,
    RoleAssignmentRequest,
)
from identity_platform.identity_platform.auth_service.service import AuthService
from identity_platform.identity_platform.auth_service import service as service_module
from identity_platform.identity_platform.auth_service.store import StoreResult, seed_roles

DURATION_DAYS = 7


@pytest.fixture
def issuer():
    return TokenIssuer(SigningConfig(
        key="unit-test-signing-key-0123456789abcdef",
        issuer="TestIssuer",
        audience="TestAudience",
        duration_in_days=DURATION_DAYS,
    ))


@pytest.fixture
def store():
    s = InMemoryCredentialStore()
    seed_roles(s)
    return s


@pytest.fixture
def service(store, issuer):
    return AuthService(store, issuer)


def registration(username="alice", email="alice@example.com", password="Secret123!"):
    return RegistrationRequest(
        username=username,
        email=email,
        password=password,
        first_name="Alice",
        last_name="Wonder",
    )


def test_register_success(service, issuer):
    result = service.register(registration())

    assert result.success is True
    assert result.message == "User registered successfully"
    assert result.roles == ["User"]

    claims = issuer.decode(result.token)
    assert claims["sub"] == "alice"
    assert claims["email"] == "alice@example.com"
    assert claims["roles"] == ["User"]
    assert claims["exp"] - claims["iat"] == int(timedelta(days=DURATION_DAYS).total_seconds())
    assert int(result.expires_on.timestamp()) == claims["exp"]


@pytest.mark.parametrize("first,second", [
    ("alice@example.com", "ALICE@example.com"),
    ("ALICE@example.com", "alice@example.com"),
])
def test_duplicate_email_one_success_one_failure(service, first, second):
    results = [
        service.register(registration(username="alice", email=first)),
        service.register(registration(username="alice2", email=second)),
    ]

    assert [r.success for r in results] == [True, False]
    assert results[1].message == "Email is already Registered"
    assert results[1].token is None
    assert results[1].expires_on is None


def test_duplicate_username(service):
    assert service.register(registration()).success
    result = service.register(registration(username="Alice", email="other@example.com"))

    assert result.success is False
    assert result.message == "Name is already Registered"


def test_register_password_policy_errors_are_concatenated(service, store):
    result = service.register(registration(password="abc"))

    assert result.success is False
    assert result.message == " ".join([
        "Passwords must be at least 6 characters.",
        "Passwords must have at least one non alphanumeric character.",
        "Passwords must have at least one digit ('0'-'9').",
        "Passwords must have at least one uppercase ('A'-'Z').",
    ])
    assert store.find_by_email("alice@example.com") is None


def test_register_storage_race_is_generic_failure(service, store, monkeypatch):
    assert service.register(registration()).success

    # Simulate a concurrent registration that passed the existence checks
    monkeypatch.setattr(store, "find_by_email", lambda email: None)
    monkeypatch.setattr(store, "find_by_username", lambda username: None)
    result = service.register(registration())

    assert result.success is False
    assert result.message == "Something went wrong"


def test_login_success_uses_current_roles(service, store, issuer):
    service.register(registration())
    user = store.find_by_email("alice@example.com")
    store.add_role(user, "Admin")

    result = service.login(LoginRequest(email="alice@example.com", password="Secret123!"))

    assert result.success is True
    assert result.message == "User login successfully"
    assert result.roles == ["Admin", "User"]
    assert set(issuer.decode(result.token)["roles"]) == {"Admin", "User"}


def test_login_failure_messages_identical(service):
    service.register(registration())

    wrong_password = service.login(LoginRequest(email="alice@example.com", password="Wrong123!"))
    unknown_email = service.login(LoginRequest(email="ghost@example.com", password="Secret123!"))

    assert wrong_password == unknown_email
    assert wrong_password.message == "Email or Password is incorrect!"
    assert wrong_password.token is None


def test_login_token_carries_extra_claims(service, store, issuer):
    service.register(registration())
    user = store.find_by_email("alice@example.com")
    store.add_claim(user, "department", "research")

    result = service.login(LoginRequest(email="alice@example.com", password="Secret123!"))

    assert issuer.decode(result.token)["department"] == "research"


def test_assign_role_twice(service, store):
    service.register(registration())
    user = store.find_by_email("alice@example.com")
    before = len(store.get_roles(user))

    request = RoleAssignmentRequest(user_id=user.id, role="Admin")
    assert service.assign_role(request) is None
    assert service.assign_role(request) == "User already assigned to this role"

    assert len(store.get_roles(user)) == before + 1


def test_assign_role_is_case_insensitive(service, store):
    service.register(registration())
    user = store.find_by_email("alice@example.com")

    assert service.assign_role(RoleAssignmentRequest(user_id=user.id, role="admin")) is None
    assert store.get_roles(user) == ["Admin", "User"]


def test_assign_role_unknown_user_or_role(service, store):
    service.register(registration())
    user = store.find_by_email("alice@example.com")

    assert service.assign_role(RoleAssignmentRequest(user_id=user.id, role="Owner")) == "Invalid user ID or Role"
    assert service.assign_role(RoleAssignmentRequest(user_id="missing", role="Admin")) == "Invalid user ID or Role"


def test_assign_role_persistence_failure(service, store, monkeypatch):
    service.register(registration())
    user = store.find_by_email("alice@example.com")
    monkeypatch.setattr(store, "add_role", Mock(return_value=StoreResult.failed("disk full")))

    assert service.assign_role(RoleAssignmentRequest(user_id=user.id, role="Admin")) == "Something went wrong"


def test_register_removes_user_when_default_role_fails(service, store, monkeypatch):
    monkeypatch.setattr(store, "add_role", Mock(return_value=StoreResult.failed("disk full")))

    result = service.register(registration())

    assert result.success is False
    assert result.message == "Something went wrong"
    assert store.find_by_email("alice@example.com") is None
    assert service.login(LoginRequest(email="alice@example.com", password="Secret123!")).success is False

    monkeypatch.undo()
    retry = service.register(registration())
    assert retry.success is True
    assert retry.roles == ["User"]


def test_login_unknown_email_still_hashes_password(service, monkeypatch):
    calls = Mock(wraps=service_module.verify_password)
    monkeypatch.setattr(service_module, "verify_password", calls)

    result = service.login(LoginRequest(email="ghost@example.com", password="Secret123!"))

    assert result.message == "Email or Password is incorrect!"
    calls.assert_called_once_with("Secret123!", service_module.DUMMY_PASSWORD_HASH)
