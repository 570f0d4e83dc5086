"""
Runtime configuration for the portfolio admin backend.

Every value can be set through an environment variable of the same name in
upper case (or a ``.env`` file); the defaults are the local development ones.
"""

from functools import lru_cache
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MONGODB_URI = "mongodb://localhost:27017/vibe-coding-portfolio"
DEFAULT_DATABASE_NAME = "vibe-coding-portfolio"
DEFAULT_JWT_SECRET = "vibe-coding-portfolio-secret-key-2025"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:3001,http://localhost:3002"


def parse_cors_origins(value: str) -> List[str]:
    """Comma-separated origins to a list"""
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def _database_from_uri(uri: str) -> str:
    path = urlparse(uri).path.lstrip("/")
    return path or DEFAULT_DATABASE_NAME


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = "development"

    # Database
    mongodb_uri: str = DEFAULT_MONGODB_URI
    # empty means: the database named in MONGODB_URI
    mongodb_database: str = ""
    mongodb_timeout_ms: int = 5000
    mongodb_retry_seconds: float = 30.0

    # Admin account
    admin_username: str = "admin"
    admin_password: str = "admin123"
    admin_password_hash: Optional[str] = None

    # Token / cookie
    jwt_secret: str = Field(
        default=DEFAULT_JWT_SECRET,
        validation_alias=AliasChoices("JWT_SECRET", "SESSION_SECRET", "jwt_secret"),
    )
    jwt_algorithm: str = "HS256"
    token_expire_hours: int = 24
    cookie_name: str = "admin_token"
    cookie_secure: bool = False
    cross_site_cookies: bool = False

    # HTTP (CORS stored as comma-separated string, parsed to list)
    cors_origins_str: str = Field(
        default=DEFAULT_CORS_ORIGINS,
        validation_alias=AliasChoices("CORS_ORIGINS", "cors_origins_str"),
    )
    admin_dir: str = "admin"
    upload_dir: str = "uploads/projects"
    upload_url_prefix: str = "/projects"
    max_upload_images: int = 9

    # Visitor stats day boundary
    timezone: str = "UTC"

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    @model_validator(mode="after")
    def _default_database_name(self) -> "Settings":
        if not self.mongodb_database:
            self.mongodb_database = _database_from_uri(self.mongodb_uri)
        return self

    @property
    def cors_origins(self) -> List[str]:
        return parse_cors_origins(self.cors_origins_str)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
