"""
SQLAlchemy-backed credential store.

One instance wraps one request-scoped Session. Every write commits on its own;
on SQLAlchemyError the session is rolled back and a failed StoreResult with a
generic message is returned, so storage details never reach the caller.
Uniqueness of normalized email, username and role name is enforced by the
schema, which settles concurrent registrations.
"""
from typing import List, Optional, Tuple
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .auth import hash_password, verify_password as check_password
from .models import Role, User, UserClaim, UserRole
from .store import GENERIC_FAILURE, StoreResult, StoredUser, check_new_user, normalize

logger = logging.getLogger(__name__)


def _to_stored_user(row: User) -> StoredUser:
    return StoredUser(
        id=row.id,
        username=row.username,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
    )


class SqlCredentialStore:
    def __init__(self, db: Session):
        self.db = db

    def _user_row(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def _role_row(self, role: str) -> Optional[Role]:
        return self.db.query(Role).filter(Role.normalized_name == normalize(role)).first()

    def _commit(self, action: str) -> StoreResult:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Credential store write failed: action=%s, error=%s", action, e)
            return StoreResult.failed(GENERIC_FAILURE)
        return StoreResult.success()

    def find_by_email(self, email: str) -> Optional[StoredUser]:
        row = self.db.query(User).filter(User.normalized_email == normalize(email)).first()
        return _to_stored_user(row) if row else None

    def find_by_username(self, username: str) -> Optional[StoredUser]:
        row = self.db.query(User).filter(User.normalized_username == normalize(username)).first()
        return _to_stored_user(row) if row else None

    def find_by_id(self, user_id: str) -> Optional[StoredUser]:
        row = self._user_row(user_id)
        return _to_stored_user(row) if row else None

    def create_user(self, user: StoredUser, password: str) -> StoreResult:
        errors = check_new_user(user, password)
        if errors:
            return StoreResult.failed(*errors)

        self.db.add(User(
            id=user.id,
            username=user.username,
            normalized_username=normalize(user.username),
            email=user.email,
            normalized_email=normalize(user.email),
            first_name=user.first_name,
            last_name=user.last_name,
            password_hash=hash_password(password),
        ))
        return self._commit("create_user")

    def delete_user(self, user: StoredUser) -> StoreResult:
        row = self._user_row(user.id)
        if not row:
            return StoreResult.failed(GENERIC_FAILURE)
        self.db.query(UserRole).filter(UserRole.user_id == user.id).delete()
        self.db.delete(row)
        return self._commit("delete_user")

    def verify_password(self, user: StoredUser, password: str) -> bool:
        row = self._user_row(user.id)
        if not row:
            return False
        return check_password(password, row.password_hash)

    def get_roles(self, user: StoredUser) -> List[str]:
        rows = (
            self.db.query(Role.name)
            .join(UserRole, UserRole.role_id == Role.id)
            .filter(UserRole.user_id == user.id)
            .order_by(Role.name)
            .all()
        )
        return [name for (name,) in rows]

    def has_role(self, user: StoredUser, role: str) -> bool:
        return (
            self.db.query(UserRole)
            .join(Role, UserRole.role_id == Role.id)
            .filter(UserRole.user_id == user.id, Role.normalized_name == normalize(role))
            .first()
        ) is not None

    def add_role(self, user: StoredUser, role: str) -> StoreResult:
        role_row = self._role_row(role)
        if not role_row or not self._user_row(user.id):
            return StoreResult.failed(GENERIC_FAILURE)
        self.db.add(UserRole(user_id=user.id, role_id=role_row.id))
        return self._commit("add_role")

    def role_exists(self, role: str) -> bool:
        return self._role_row(role) is not None

    def create_role(self, role: str) -> StoreResult:
        self.db.add(Role(name=role, normalized_name=normalize(role)))
        return self._commit("create_role")

    def get_claims(self, user: StoredUser) -> List[Tuple[str, str]]:
        rows = (
            self.db.query(UserClaim)
            .filter(UserClaim.user_id == user.id)
            .order_by(UserClaim.id)
            .all()
        )
        return [(row.claim_type, row.claim_value) for row in rows]

    def add_claim(self, user: StoredUser, claim_type: str, claim_value: str) -> StoreResult:
        if not self._user_row(user.id):
            return StoreResult.failed(GENERIC_FAILURE)
        self.db.add(UserClaim(user_id=user.id, claim_type=claim_type, claim_value=claim_value))
        return self._commit("add_claim")
