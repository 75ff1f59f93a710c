"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    APP_NAME: str = "Issue Management Gateway"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api/v1/issues"

    CORS_ORIGINS: str = "http://localhost:3000"
    ALLOWED_HOSTS: str = "*"

    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = ""
    JWT_USERNAME_CLAIM: str = "preferred_username"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    PROJECT_ID_HEADER: str = "X-Project-Id"
    TENANT_ID_HEADER: str = "X-Tenant-Id"

    # collaborator services
    ISSUE_SERVICE_URL: str = "http://localhost:8081"
    ACCESS_SERVICE_URL: str = "http://localhost:8082"
    ACTIVITY_LOG_URL: str = "http://localhost:8083"
    FILE_STORAGE_URL: str = "http://localhost:8084"
    EMAIL_INGESTION_URL: str = "http://localhost:8085"
    COLLABORATOR_TIMEOUT_SECONDS: float = 15.0

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    DEFAULT_PER_STATUS_LIMIT: int = 5
    ACTIVITY_LOG_IN_BACKGROUND: bool = False

    MAX_UPLOAD_FILES: int = 10
    MAX_UPLOAD_BYTES: int = 25 * 1024 * 1024

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MAX_REQUESTS: int = 240
    RATE_LIMIT_UPLOAD_MAX_REQUESTS: int = 20

    model_config = SettingsConfigDict(env_file=str(BASE_DIR / ".env"), env_file_encoding="utf-8", extra="ignore")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def allowed_hosts(self) -> list[str]:
        hosts = [host.strip() for host in self.ALLOWED_HOSTS.split(",") if host.strip()]
        return hosts or ["*"]

    @property
    def is_production(self) -> bool:
        return self.ENV.strip().lower() in {"production", "prod"}

    def validate_runtime_security(self) -> None:
        if self.is_production and self.JWT_SECRET == DEFAULT_JWT_SECRET:
            raise RuntimeError("JWT_SECRET must be configured in production")


settings = Settings()
