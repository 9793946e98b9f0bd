from pydantic import BaseModel

from datetime import datetime
from typing import List, Optional

# Request fields are optional at the schema level; presence and length are
# checked by the functions in validators.py so every problem is reported at once.

class RegistrationRequest(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class RoleAssignmentRequest(BaseModel):
    user_id: Optional[str] = None
    role: Optional[str] = None


class FieldError(BaseModel):
    field: str
    message: str


class AuthResult(BaseModel):
    success: bool = False
    message: str
    username: Optional[str] = None
    email: Optional[str] = None
    token: Optional[str] = None
    roles: List[str] = []
    expires_on: Optional[datetime] = None
