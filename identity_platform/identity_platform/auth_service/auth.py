from passlib.context import CryptContext
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging
import uuid
import jwt

from .config import SigningConfig
from .store import StoredUser

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# Claims the issuer sets itself; extra claims may not override them
REGISTERED_CLAIMS = frozenset({"sub", "jti", "email", "uid", "roles", "iss", "aud", "iat", "exp", "nbf"})

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

# Verified against on logins for unknown emails so both failure paths cost one hash
DUMMY_PASSWORD_HASH = hash_password("identity-platform-timing-dummy")


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_on: datetime


class TokenIssuer:
    """
    Builds and verifies HS256-signed bearer tokens.

    Holds only the immutable SigningConfig, so a single instance is shared
    across requests.
    """

    def __init__(self, config: SigningConfig):
        self._config = config
        self._key = config.key.encode("utf-8")

    @property
    def config(self) -> SigningConfig:
        return self._config

    def issue(
        self,
        user: StoredUser,
        roles: Iterable[str],
        extra_claims: Optional[Iterable[Tuple[str, str]]] = None,
    ) -> IssuedToken:
        """
        Issue a signed token for `user`.

        Args:
            user: User with a username, email and id
            roles: Role names currently assigned to the user
            extra_claims: (type, value) pairs attached to the user record

        Returns:
            IssuedToken with the encoded token and its expiry (UTC)
        """
        issued_at = datetime.now(timezone.utc).replace(microsecond=0)
        expires_on = issued_at + timedelta(days=self._config.duration_in_days)

        payload: Dict[str, Any] = _group_claims(extra_claims or ())
        payload.update({
            "sub": user.username,
            "jti": str(uuid.uuid4()),
            "email": user.email,
            "uid": user.id,
            "roles": list(roles),
            "iss": self._config.issuer,
            "aud": self._config.audience,
            "iat": issued_at,
            "exp": expires_on,
        })
        token = jwt.encode(payload, self._key, algorithm=ALGORITHM)
        return IssuedToken(token=token, expires_on=expires_on)

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify signature, expiry, issuer and audience and return the claims.

        Raises:
            jwt.InvalidTokenError: If the token fails any check
        """
        return jwt.decode(
            token,
            self._key,
            algorithms=[ALGORITHM],
            audience=self._config.audience,
            issuer=self._config.issuer,
        )


def _group_claims(claims: Iterable[Tuple[str, str]]) -> Dict[str, Any]:
    grouped: Dict[str, List[str]] = {}
    for claim_type, claim_value in claims:
        if claim_type in REGISTERED_CLAIMS:
            logger.warning("Ignoring extra claim %r: name is reserved", claim_type)
            continue
        grouped.setdefault(claim_type, []).append(claim_value)
    return {k: v[0] if len(v) == 1 else v for k, v in grouped.items()}
