from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "DesignDesk API"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True
    csp_production: str = "default-src 'self'; frame-ancestors 'none'"

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10
    run_migrations_on_startup: bool = False

    # Auth
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "JWT_SECRET_KEY must be changed from default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Reject wildcards since credentials are allowed."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    # Blob storage for project files
    blob_backend: Literal["local", "s3"] = "local"
    blob_local_root: str = "./var/project-files"
    blob_bucket: str = "project-files"
    blob_s3_endpoint_url: str | None = None  # S3-compatible endpoint (R2, MinIO, ...)
    blob_s3_region: str | None = None
    blob_s3_access_key_id: str | None = None
    blob_s3_secret_access_key: str | None = None
    signed_url_ttl_seconds: int = 60
    public_base_url: str = "http://localhost:8000"  # Used to build local download links
    max_upload_bytes: int = 25 * 1024 * 1024

    # Rate limiting (slowapi, per client IP)
    auth_rate_limit: str = "5/minute"


@lru_cache
def get_settings() -> Settings:
    return Settings()
