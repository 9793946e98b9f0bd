"""
Auth Router - registration, login and role assignment endpoints.
"""
from functools import lru_cache
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth import TokenIssuer
from ..config import settings
from ..db import get_db
from ..schemas import AuthResult, LoginRequest, RegistrationRequest, RoleAssignmentRequest
from ..service import AuthService
from ..sql_store import SqlCredentialStore
from ..validators import validate_login, validate_registration, validate_role_assignment

router = APIRouter(prefix="/api/auth", tags=["auth"])


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Build the process-wide issuer. Raises ValidationError if the signing settings are invalid."""
    return TokenIssuer(settings.signing_config())


def get_auth_service(
    db: Session = Depends(get_db),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(SqlCredentialStore(db), token_issuer)


def _reject_invalid(errors):
    if errors:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=[e.model_dump() for e in errors],
        )


@router.post("/register", response_model=AuthResult)
def register(payload: RegistrationRequest, service: AuthService = Depends(get_auth_service)):
    _reject_invalid(validate_registration(payload))

    result = service.register(payload)
    if not result.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)
    return result


@router.post("/Login", response_model=AuthResult)
def login(payload: LoginRequest, service: AuthService = Depends(get_auth_service)):
    _reject_invalid(validate_login(payload))

    result = service.login(payload)
    if not result.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)
    return result


@router.post("/Addrole", response_model=RoleAssignmentRequest)
def add_role(payload: RoleAssignmentRequest, service: AuthService = Depends(get_auth_service)):
    _reject_invalid(validate_role_assignment(payload))

    error = service.assign_role(payload)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
    return payload
