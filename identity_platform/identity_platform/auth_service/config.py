"""
Configuration management for the Auth Service
"""
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

# HS256 keys shorter than the digest size are rejected at startup
MIN_KEY_BYTES = 32


class SigningConfig(BaseModel):
    """Token signing parameters. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    key: str
    issuer: str
    audience: str
    duration_in_days: float

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        if len(v.encode("utf-8")) < MIN_KEY_BYTES:
            raise ValueError(f"signing key must be at least {MIN_KEY_BYTES} bytes for HS256")
        return v

    @field_validator("issuer", "audience")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("duration_in_days")
    @classmethod
    def validate_duration(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("token lifetime must be positive")
        return v


class Settings(BaseSettings):
    """Auth Service configuration loaded from environment variables"""

    # Server Configuration
    LOG_LEVEL: str = "INFO"

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./identity.db"

    # Token Signing
    JWT_KEY: str = "change-this-secret-in-prod-0123456789abcdef"
    JWT_ISSUER: str = "IdentityPlatform"
    JWT_AUDIENCE: str = "IdentityPlatformUsers"
    JWT_DURATION_IN_DAYS: float = 30

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    def signing_config(self) -> SigningConfig:
        """Build the validated signing parameters. Raises ValidationError on a bad key."""
        return SigningConfig(
            key=self.JWT_KEY,
            issuer=self.JWT_ISSUER,
            audience=self.JWT_AUDIENCE,
            duration_in_days=self.JWT_DURATION_IN_DAYS,
        )


# Global settings instance
settings = Settings()
