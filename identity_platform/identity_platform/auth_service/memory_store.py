"""
In-memory credential store for tests and local experiments.
"""
from dataclasses import replace
from typing import Dict, List, Optional, Set, Tuple
import threading

from .auth import hash_password, verify_password as check_password
from .store import GENERIC_FAILURE, StoreResult, StoredUser, check_new_user, normalize


class InMemoryCredentialStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[str, StoredUser] = {}
        self._password_hashes: Dict[str, str] = {}
        self._roles: Dict[str, str] = {}  # normalized name -> name
        self._memberships: Dict[str, Set[str]] = {}  # user id -> normalized role names
        self._claims: Dict[str, List[Tuple[str, str]]] = {}

    def find_by_email(self, email: str) -> Optional[StoredUser]:
        key = normalize(email)
        with self._lock:
            for user in self._users.values():
                if normalize(user.email) == key:
                    return replace(user)
        return None

    def find_by_username(self, username: str) -> Optional[StoredUser]:
        key = normalize(username)
        with self._lock:
            for user in self._users.values():
                if normalize(user.username) == key:
                    return replace(user)
        return None

    def find_by_id(self, user_id: str) -> Optional[StoredUser]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def create_user(self, user: StoredUser, password: str) -> StoreResult:
        errors = check_new_user(user, password)
        if errors:
            return StoreResult.failed(*errors)

        password_hash = hash_password(password)
        with self._lock:
            # Same uniqueness rules the relational schema enforces
            for existing in self._users.values():
                if (existing.id == user.id
                        or normalize(existing.email) == normalize(user.email)
                        or normalize(existing.username) == normalize(user.username)):
                    return StoreResult.failed(GENERIC_FAILURE)
            self._users[user.id] = replace(user)
            self._password_hashes[user.id] = password_hash
            self._memberships[user.id] = set()
            self._claims[user.id] = []
        return StoreResult.success()

    def delete_user(self, user: StoredUser) -> StoreResult:
        with self._lock:
            if self._users.pop(user.id, None) is None:
                return StoreResult.failed(GENERIC_FAILURE)
            self._password_hashes.pop(user.id, None)
            self._memberships.pop(user.id, None)
            self._claims.pop(user.id, None)
        return StoreResult.success()

    def verify_password(self, user: StoredUser, password: str) -> bool:
        with self._lock:
            password_hash = self._password_hashes.get(user.id)
        if password_hash is None:
            return False
        return check_password(password, password_hash)

    def get_roles(self, user: StoredUser) -> List[str]:
        with self._lock:
            return sorted(self._roles[key] for key in self._memberships.get(user.id, ()))

    def has_role(self, user: StoredUser, role: str) -> bool:
        with self._lock:
            return normalize(role) in self._memberships.get(user.id, ())

    def add_role(self, user: StoredUser, role: str) -> StoreResult:
        key = normalize(role)
        with self._lock:
            memberships = self._memberships.get(user.id)
            if memberships is None or key not in self._roles or key in memberships:
                return StoreResult.failed(GENERIC_FAILURE)
            memberships.add(key)
        return StoreResult.success()

    def role_exists(self, role: str) -> bool:
        with self._lock:
            return normalize(role) in self._roles

    def create_role(self, role: str) -> StoreResult:
        key = normalize(role)
        with self._lock:
            if key in self._roles:
                return StoreResult.failed(GENERIC_FAILURE)
            self._roles[key] = role
        return StoreResult.success()

    def get_claims(self, user: StoredUser) -> List[Tuple[str, str]]:
        with self._lock:
            return list(self._claims.get(user.id, ()))

    def add_claim(self, user: StoredUser, claim_type: str, claim_value: str) -> StoreResult:
        with self._lock:
            claims = self._claims.get(user.id)
            if claims is None:
                return StoreResult.failed(GENERIC_FAILURE)
            claims.append((claim_type, claim_value))
        return StoreResult.success()
