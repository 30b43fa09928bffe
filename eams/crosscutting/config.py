"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Share one signing secret and one set of transport endpoints between the
    gateway, the auth service and the absence service

Collaborators:
  - container.py: builds token codec, repositories and service clients
  - serve.py: reads host/port pairs to launch each process
  - crosscutting/logger.py: log level and format

Constraints:
  - No business logic, pure configuration
  - JWT_SECRET must be identical in every process that issues or verifies
    tokens, otherwise all verification fails

Notes:
  - Singleton via lru_cache
  - DATABASE_URL empty => in-memory stores (local dev / tests)
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# 7 days: session tokens issued to edge clients.
DEFAULT_ACCESS_TTL_MINUTES = 7 * 24 * 60

_INSECURE_SECRETS = {"dev-secret", "supersecret", "changeme", "change-me", "password"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: development / test / production
        jwt_secret: Shared HS256 signing secret
        jwt_access_ttl_minutes: Access token TTL (default: 7 days)
        auth_host / auth_port: Auth service transport endpoint
        absence_host / absence_port: Absence service transport endpoint
        gateway_host / gateway_port: Edge gateway bind address
        rpc_timeout_seconds: Max wait for one command reply (default: 5s)
        database_url: PostgreSQL connection string (empty => in-memory)
        db_pool_min_size / db_pool_max_size: Connection pool bounds
        db_statement_timeout_ms: Per-statement timeout
        log_level: Root log level (default: INFO)
        log_json: Emit JSON log lines (default: True)
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    app_env: str = "development"

    # Security - JWT
    jwt_secret: str = "dev-secret"
    jwt_access_ttl_minutes: int = DEFAULT_ACCESS_TTL_MINUTES

    # Transport endpoints
    auth_host: str = "127.0.0.1"
    auth_port: int = 4001
    absence_host: str = "127.0.0.1"
    absence_port: int = 4002
    gateway_host: str = "127.0.0.1"
    gateway_port: int = 3000
    rpc_timeout_seconds: float = 5.0

    # Database - Connection Pool
    database_url: str = ""
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("auth_port", "absence_port", "gateway_port")
    @classmethod
    def port_in_range(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("jwt_access_ttl_minutes")
    @classmethod
    def ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("jwt_access_ttl_minutes must be greater than 0")
        return v

    @field_validator("rpc_timeout_seconds")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("rpc_timeout_seconds must be greater than 0")
        return v

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret or jwt_secret in _INSECURE_SECRETS:
            raise ValueError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters in production")
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def uses_database(self) -> bool:
        return bool(self.database_url.strip())

    def auth_base_url(self) -> str:
        return f"http://{self.auth_host}:{self.auth_port}"

    def absence_base_url(self) -> str:
        return f"http://{self.absence_host}:{self.absence_port}"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Cached to avoid re-parsing env vars on every request.
    Call get_settings.cache_clear() in tests to reset.
    """
    return Settings()
