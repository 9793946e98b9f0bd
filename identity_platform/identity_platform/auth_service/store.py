"""
Credential store contract.

The Auth Workflow only talks to users, passwords, roles and claims through
the CredentialStore protocol. Two implementations exist:

- SqlCredentialStore (sql_store.py): SQLAlchemy session-backed, used by the API
- InMemoryCredentialStore (memory_store.py): dict-backed test double

Both enforce the same creation policy (check_new_user) and compare emails,
usernames and role names case-insensitively through normalize().
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol, Tuple
import string
import uuid

DEFAULT_ROLE = "User"
DEFAULT_ROLES = ("User", "Admin")

GENERIC_FAILURE = "Something went wrong"

ALLOWED_USERNAME_CHARS = frozenset(string.ascii_letters + string.digits + "-._@+")
MIN_PASSWORD_LENGTH = 6


@dataclass
class StoredUser:
    username: str
    email: str
    first_name: str
    last_name: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class StoreResult:
    succeeded: bool
    errors: List[str] = field(default_factory=list)

    @classmethod
    def success(cls) -> "StoreResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: str) -> "StoreResult":
        return cls(succeeded=False, errors=list(errors))


def normalize(value: str) -> str:
    return value.upper()


def check_new_user(user: StoredUser, password: str) -> List[str]:
    """
    Validate a user about to be created.

    Returns:
        One description per violated rule; empty when the user may be stored.
    """
    errors = []
    if not user.username or any(ch not in ALLOWED_USERNAME_CHARS for ch in user.username):
        errors.append(f"Username '{user.username}' is invalid, can only contain letters or digits.")

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters.")
    if all(ch.isalnum() for ch in password):
        errors.append("Passwords must have at least one non alphanumeric character.")
    if not any(ch.isdigit() for ch in password):
        errors.append("Passwords must have at least one digit ('0'-'9').")
    if not any(ch.islower() for ch in password):
        errors.append("Passwords must have at least one lowercase ('a'-'z').")
    if not any(ch.isupper() for ch in password):
        errors.append("Passwords must have at least one uppercase ('A'-'Z').")
    return errors


class CredentialStore(Protocol):
    """Persistence of users, password credentials, role memberships and claims."""

    def find_by_email(self, email: str) -> Optional[StoredUser]:
        ...

    def find_by_username(self, username: str) -> Optional[StoredUser]:
        ...

    def find_by_id(self, user_id: str) -> Optional[StoredUser]:
        ...

    def create_user(self, user: StoredUser, password: str) -> StoreResult:
        """Hash the password and persist the user under user.id."""
        ...

    def delete_user(self, user: StoredUser) -> StoreResult:
        """Remove the user with its role memberships and claims."""
        ...

    def verify_password(self, user: StoredUser, password: str) -> bool:
        ...

    def get_roles(self, user: StoredUser) -> List[str]:
        ...

    def has_role(self, user: StoredUser, role: str) -> bool:
        ...

    def add_role(self, user: StoredUser, role: str) -> StoreResult:
        ...

    def role_exists(self, role: str) -> bool:
        ...

    def create_role(self, role: str) -> StoreResult:
        ...

    def get_claims(self, user: StoredUser) -> List[Tuple[str, str]]:
        ...

    def add_claim(self, user: StoredUser, claim_type: str, claim_value: str) -> StoreResult:
        ...


def seed_roles(store: CredentialStore, roles: Iterable[str] = DEFAULT_ROLES) -> List[str]:
    """
    Ensure every role in `roles` exists.

    Returns:
        Names of the roles created by this call (empty when all existed)
    """
    created = []
    for role in roles:
        if store.role_exists(role):
            continue
        result = store.create_role(role)
        if not result.succeeded:
            # Another process may have seeded it between the check and the insert
            if store.role_exists(role):
                continue
            raise RuntimeError(f"Failed to seed role {role!r}: {' '.join(result.errors)}")
        created.append(role)
    return created
