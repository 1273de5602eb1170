"""
GateWatch Application Configuration
Security-operations settings for the admin plane
"""

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from GATEWATCH_* environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="GATEWATCH_", extra="allow")

    # Application
    app_name: str = "GateWatch"
    app_version: str = "1.0.0"
    debug: bool = False

    # Security
    jwt_secret: str
    jwt_algorithm: str = "HS256"

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = 5.0

    # Allowed origins for CORS (configurable via environment)
    allowed_origins: List[str] = Field(
        default_factory=lambda: os.getenv("GATEWATCH_ALLOWED_ORIGINS", "https://localhost:3001").split(",")
    )

    # Incident response
    incident_retention_days: int = Field(default=90, ge=1)
    statistics_scan_limit: int = Field(default=10000, ge=1)
    auto_incident_dedup_hours: int = Field(default=24, ge=0)

    # Logging
    log_level: str = "INFO"
    audit_log_file: Optional[str] = None

    @field_validator("jwt_secret")
    @classmethod
    def jwt_secret_must_be_strong(cls, v: str) -> str:
        if len(v) < 32:
            raise ValueError("JWT secret must be at least 32 characters long")
        return v

    @field_validator("allowed_origins")
    @classmethod
    def validate_origins(cls, v: List[str]) -> List[str]:
        for origin in v:
            if not origin.startswith(("https://", "http://localhost")):
                raise ValueError("All origins must use HTTPS (except localhost)")
        return v

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("Redis URL must start with redis://, rediss:// or unix://")
        return v

    @property
    def incident_retention_seconds(self) -> int:
        return self.incident_retention_days * 24 * 60 * 60


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings"""
    return Settings()


# Security headers added to every response
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cache-Control": "no-store",
}
