"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field, model_validator


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(
        default=None, description="Log file path (empty disables the file sink)"
    )
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./database.db",
        description="Database connection URL",
    )
    create_tables: bool = Field(
        default=True, description="Create missing tables when the application starts"
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        """Whether the configured URL targets SQLite."""
        return self.url.startswith("sqlite")

    @computed_field
    @property
    def is_in_memory(self) -> bool:
        """Whether the URL names an in-memory SQLite database."""
        return self.is_sqlite and self.url.rstrip("/") in ("sqlite:", "sqlite:///:memory:")

    @computed_field
    @property
    def connection_string(self) -> str:
        """Connection string handed to the engine."""
        from sqlalchemy.engine import make_url

        return make_url(self.url).render_as_string(hide_password=False)


class PaginationConfig(BaseModel):
    """Defaults and bounds applied to list requests."""

    default_page_number: int = Field(default=1, ge=1)
    default_page_size: int = Field(default=10, ge=1)
    min_page_size: int = Field(default=1, ge=1)
    max_page_size: int = Field(default=20, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> PaginationConfig:
        if self.min_page_size > self.max_page_size:
            raise ValueError("min_page_size must not exceed max_page_size")
        if not self.min_page_size <= self.default_page_size <= self.max_page_size:
            raise ValueError("default_page_size must lie within the page size bounds")
        return self


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    title: str = Field(default="User API", description="OpenAPI title")
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    pagination: PaginationConfig = Field(
        default_factory=PaginationConfig, description="List pagination settings"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
