"""
Application configuration using Pydantic Settings
"""
from datetime import timedelta
from functools import lru_cache
from typing import List

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Only usable for local development; rejected when ENVIRONMENT=production.
INSECURE_DEV_SECRET = "dev-only-insecure-secret-change-me"

ALLOWED_JWT_ALGORITHMS = ("HS256", "HS384", "HS512")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """

    # Application
    APP_NAME: str = "Fraudlr"
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./fraudlr.db"
    RUN_MIGRATIONS: bool = False

    # Session tokens
    JWT_SECRET: str = INSECURE_DEV_SECRET
    JWT_ALGORITHM: str = "HS256"
    TOKEN_EXPIRE_DAYS: int = 7
    SESSION_COOKIE_NAME: str = "auth-token"

    # Password hashing
    BCRYPT_ROUNDS: int = 12

    # CORS (comma-separated)
    CORS_ORIGINS: str = "http://localhost:3000"

    # Case uploads
    UPLOADS_DIR: str = "./uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        # Heroku/Render style URLs use the old scheme SQLAlchemy no longer accepts
        if isinstance(v, str) and v.startswith("postgres://"):
            return "postgresql://" + v[len("postgres://"):]
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def check_jwt_algorithm(cls, v: str) -> str:
        if v not in ALLOWED_JWT_ALGORITHMS:
            raise ValueError(f"JWT_ALGORITHM must be one of {', '.join(ALLOWED_JWT_ALGORITHMS)}")
        return v

    @field_validator("TOKEN_EXPIRE_DAYS", "BCRYPT_ROUNDS")
    @classmethod
    def check_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @model_validator(mode="after")
    def check_production_secret(self) -> "Settings":
        if self.is_production and (not self.JWT_SECRET or self.JWT_SECRET == INSECURE_DEV_SECRET):
            raise ValueError("JWT_SECRET must be set to a strong random value in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def token_lifetime(self) -> timedelta:
        return timedelta(days=self.TOKEN_EXPIRE_DAYS)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from a comma-separated string"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
