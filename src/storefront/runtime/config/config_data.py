"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class RateLimiterConfig(BaseModel):
    """Rate limiter configuration model."""

    requests: int = Field(
        default=100, description="Number of requests allowed per window"
    )
    window_ms: int = Field(default=60000, description="Time window in milliseconds")
    enabled: bool = Field(default=True, description="Enable rate limiting")
    per_endpoint: bool = Field(
        default=True, description="Apply rate limiting per endpoint"
    )
    per_method: bool = Field(
        default=True, description="Apply rate limiting per HTTP method"
    )
    auth_requests: int = Field(
        default=10,
        description="Requests allowed per window on credential endpoints (login/register)",
    )


class JWTConfig(BaseModel):
    """Signing and validation settings for locally issued tokens."""

    access_secret: str = Field(
        default="change-me-access-secret", description="Secret for access tokens"
    )
    refresh_secret: str = Field(
        default="change-me-refresh-secret", description="Secret for refresh tokens"
    )
    access_expiration: str = Field(
        default="15m", description="Access token lifetime (e.g. 900s, 15m, 1h, 7d)"
    )
    refresh_expiration: str = Field(
        default="7d", description="Refresh token lifetime (e.g. 900s, 15m, 1h, 7d)"
    )
    issuer: str = Field(default="storefront-api", description="Issuer claim value")
    algorithm: str = Field(default="HS256", description="Signing algorithm")
    clock_skew: int = Field(default=30, description="Clock skew tolerance in seconds")


class SecurityConfig(BaseModel):
    """Password hashing and log redaction settings."""

    bcrypt_rounds: int = Field(
        default=12, ge=4, le=31, description="bcrypt cost factor for password hashes"
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "passwordHash",
            "password_hash",
            "currentPassword",
            "newPassword",
            "token",
            "accessToken",
            "access_token",
            "refreshToken",
            "refresh_token",
            "authorization",
            "secret",
            "key",
            "apiKey",
            "creditCard",
            "cardNumber",
            "cvv",
            "ssn",
            "socialSecurityNumber",
        ],
        description="Body keys whose values are redacted before logging",
    )
    sensitive_headers: list[str] = Field(
        default_factory=lambda: ["authorization", "cookie", "x-api-key", "x-auth-token"],
        description="Header names whose values are redacted before logging",
    )


class SearchConfig(BaseModel):
    """Catalogue search tuning."""

    text_search_config: str = Field(
        default="spanish", description="PostgreSQL text search configuration"
    )
    default_limit: int = Field(default=20, description="Default page size")
    max_limit: int = Field(default=100, description="Maximum page size")
    max_listing_limit: int = Field(
        default=50, description="Maximum size of popular/recent listings"
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default="logs/app.log", description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./storefront.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")
    create_tables: bool = Field(
        default=True, description="Create missing tables on application startup"
    )

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @computed_field
    @property
    def is_memory(self) -> bool:
        """True for in-memory SQLite URLs, which need a single shared connection."""
        return self.is_sqlite and (
            self.url in ("sqlite://", "sqlite:///") or ":memory:" in self.url
        )


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    name: str = Field(default="storefront-api", description="Service name")
    version: str = Field(default="1.0.0", description="API version reported in meta")
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def base_url(self) -> str:
        """Construct the base URL from host and port."""
        scheme = "https" if self.environment == "production" else "http"
        return f"{scheme}://{self.host}:{self.port}"


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="Token signing configuration"
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )
    search: SearchConfig = Field(
        default_factory=SearchConfig, description="Catalogue search configuration"
    )
    rate_limiter: RateLimiterConfig = Field(
        default_factory=RateLimiterConfig, description="Rate limiter configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
