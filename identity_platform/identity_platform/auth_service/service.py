"""
Registration, login and role assignment.

AuthService receives its collaborators explicitly and reports every business
failure as a value (AuthResult with success=False, or an error string from
assign_role). Unexpected exceptions from the store or issuer propagate.
"""
from typing import Optional
import logging

from .auth import DUMMY_PASSWORD_HASH, TokenIssuer, verify_password
from .schemas import AuthResult, LoginRequest, RegistrationRequest, RoleAssignmentRequest
from .store import DEFAULT_ROLE, GENERIC_FAILURE, CredentialStore, StoredUser

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email is already Registered"
USERNAME_TAKEN = "Name is already Registered"
REGISTERED = "User registered successfully"
INVALID_CREDENTIALS = "Email or Password is incorrect!"
LOGGED_IN = "User login successfully"
INVALID_USER_OR_ROLE = "Invalid user ID or Role"
ROLE_ALREADY_ASSIGNED = "User already assigned to this role"


class AuthService:
    def __init__(self, store: CredentialStore, token_issuer: TokenIssuer):
        self.store = store
        self.token_issuer = token_issuer

    def register(self, request: RegistrationRequest) -> AuthResult:
        if self.store.find_by_email(request.email) is not None:
            return AuthResult(message=EMAIL_TAKEN)

        if self.store.find_by_username(request.username) is not None:
            return AuthResult(message=USERNAME_TAKEN)

        user = StoredUser(
            username=request.username,
            email=request.email,
            first_name=request.first_name,
            last_name=request.last_name,
        )
        result = self.store.create_user(user, request.password)
        if not result.succeeded:
            logger.info("[Register] Rejected: username=%s, errors=%d", request.username, len(result.errors))
            return AuthResult(message=" ".join(result.errors))

        if not self.store.add_role(user, DEFAULT_ROLE).succeeded:
            logger.error("[Register] Default role not assigned: user_id=%s, username=%s", user.id, user.username)
            if not self.store.delete_user(user).succeeded:
                logger.error("[Register] Could not remove user without roles: user_id=%s", user.id)
            return AuthResult(message=GENERIC_FAILURE)

        roles = [DEFAULT_ROLE]
        issued = self.token_issuer.issue(user, roles, self.store.get_claims(user))
        logger.info("[Register] User registered: user_id=%s, username=%s", user.id, user.username)

        return AuthResult(
            success=True,
            message=REGISTERED,
            username=user.username,
            email=user.email,
            roles=roles,
            token=issued.token,
            expires_on=issued.expires_on,
        )

    def login(self, request: LoginRequest) -> AuthResult:
        user = self.store.find_by_email(request.email)
        if user is None:
            # Hash anyway so response time does not reveal unknown accounts
            verify_password(request.password, DUMMY_PASSWORD_HASH)
            valid = False
        else:
            valid = self.store.verify_password(user, request.password)

        # Same message whether the account is missing or the password is wrong
        if not valid:
            logger.info("[Login] Failed login attempt")
            return AuthResult(message=INVALID_CREDENTIALS)

        roles = self.store.get_roles(user)
        issued = self.token_issuer.issue(user, roles, self.store.get_claims(user))
        logger.info("[Login] Successful login: user_id=%s, username=%s", user.id, user.username)

        return AuthResult(
            success=True,
            message=LOGGED_IN,
            username=user.username,
            email=user.email,
            roles=roles,
            token=issued.token,
            expires_on=issued.expires_on,
        )

    def assign_role(self, request: RoleAssignmentRequest) -> Optional[str]:
        """
        Add `request.role` to the user `request.user_id`.

        Returns:
            None on success, otherwise the error message. Unknown user and
            unknown role share one message.
        """
        user = self.store.find_by_id(request.user_id)
        if user is None or not self.store.role_exists(request.role):
            return INVALID_USER_OR_ROLE

        if self.store.has_role(user, request.role):
            return ROLE_ALREADY_ASSIGNED

        if not self.store.add_role(user, request.role).succeeded:
            logger.error("[Roles] Assignment failed: user_id=%s, role=%s", user.id, request.role)
            return GENERIC_FAILURE

        logger.info("[Roles] Role assigned: user_id=%s, role=%s", user.id, request.role)
        return None
