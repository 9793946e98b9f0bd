from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Index
from datetime import datetime, timezone
from .db import Base
from sqlalchemy.orm import relationship
import uuid


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), nullable=False)
    normalized_username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(128), nullable=False)
    normalized_email = Column(String(128), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    claims = relationship("UserClaim", back_populates="user", cascade="all, delete-orphan")


class Role(Base):
    __tablename__ = "roles"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(256), nullable=False)
    normalized_name = Column(String(256), unique=True, index=True, nullable=False)


class UserRole(Base):
    __tablename__ = "user_roles"
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role_id = Column(String, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)


class UserClaim(Base):
    __tablename__ = "user_claims"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    claim_type = Column(String, nullable=False)
    claim_value = Column(String, nullable=False)

    user = relationship("User", back_populates="claims")

    __table_args__ = (
        Index('ix_user_claims_user_id', 'user_id'),
    )
