"""
Table Sync Configuration System.

This module provides a type-safe configuration system using Pydantic.
Settings can be loaded from:
1. Environment variables (prefixed with TABLE_SYNC_)
2. Config file (TOML or JSON)
3. CLI arguments (highest priority)

Example usage:
    from table_sync.config import Settings

    # Load from environment
    settings = Settings()

    # Or with explicit values
    settings = Settings(
        oracle={"dsn": "db-host:1521/ORCLPDB1", "user": "app"},
        mysql={"host": "mysql-host", "user": "app", "database": "shop"},
    )
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Count-based retention bound for the sync history
DEFAULT_HISTORY_LIMIT = 10_000


def _to_secret(v: Any) -> SecretStr:
    if isinstance(v, SecretStr):
        return v
    if isinstance(v, str):
        return SecretStr(v)
    return SecretStr("")


class OracleConfig(BaseModel):
    """Oracle-family store connection settings."""

    dsn: str = Field(
        default="",
        description="Oracle connect string (host:port/service_name or TNS alias)",
    )
    user: str = Field(default="", description="Oracle user")
    password: SecretStr = Field(default=SecretStr(""), description="Oracle password")
    name: str = Field(default="Oracle", description="Store name used in sync reports")

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, v: Any) -> SecretStr:
        """Handle password from various sources."""
        return _to_secret(v)


class MySQLConfig(BaseModel):
    """MySQL-family store connection settings."""

    host: str = Field(default="localhost", description="MySQL host")
    port: int = Field(default=3306, ge=1, le=65535, description="MySQL port")
    user: str = Field(default="", description="MySQL user")
    password: SecretStr = Field(default=SecretStr(""), description="MySQL password")
    database: str = Field(default="", description="MySQL database (schema) name")
    charset: str = Field(default="utf8mb4", description="Connection character set")
    connect_timeout: int = Field(
        default=30,
        ge=1,
        description="Seconds to wait for a connection",
    )
    name: str = Field(default="MySQL", description="Store name used in sync reports")

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, v: Any) -> SecretStr:
        """Handle password from various sources."""
        return _to_secret(v)


class SyncOptions(BaseModel):
    """Options controlling sync behavior."""

    tables: list[str] = Field(
        default_factory=list,
        description="Tables to sync when none are given on the command line",
    )
    parameterized: bool = Field(
        default=True,
        description="Bind row values as parameters (False = inline literals)",
    )
    history_limit: int | None = Field(
        default=DEFAULT_HISTORY_LIMIT,
        ge=1,
        description="Maximum sync reports retained (None = unbounded)",
    )
    history_file: Path | None = Field(
        default=None,
        description="JSON file backing the sync history (None = in-memory only)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path (None = console only)",
    )
    format: str = Field(
        default="rich",
        pattern="^(rich|json|simple)$",
        description="Log format: rich (colored), json, or simple",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Max log file size before rotation",
    )
    backup_count: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Number of rotated log files to keep",
    )


class Settings(BaseSettings):
    """
    Main settings class for Table Sync.

    Settings are loaded in this priority (highest first):
    1. Explicit constructor arguments
    2. Environment variables (TABLE_SYNC_* prefix)
    3. Config file (if specified)
    4. Defaults

    Example:
        # From environment
        export TABLE_SYNC_ORACLE__DSN="db-host:1521/ORCLPDB1"
        export TABLE_SYNC_MYSQL__PASSWORD="secret"
        settings = Settings()

        # From config file
        settings = Settings.from_file("config.toml")
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLE_SYNC_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    oracle: OracleConfig = Field(default_factory=OracleConfig)
    mysql: MySQLConfig = Field(default_factory=MySQLConfig)
    sync: SyncOptions = Field(default_factory=SyncOptions)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "Settings":
        """Load settings from a TOML or JSON config file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        content = path.read_text()

        if path.suffix in (".toml", ".tml"):
            import tomllib

            data = tomllib.loads(content)
        elif path.suffix == ".json":
            data = json.loads(content)
        else:
            raise ValueError(f"Unsupported config format: {path.suffix}")

        return cls.model_validate(data)

    def to_file(self, path: Path | str) -> None:
        """Save current settings to a config file, passwords redacted."""
        path = Path(path)
        data = self.model_dump(mode="json", exclude_none=True)

        for section in ("oracle", "mysql"):
            if "password" in data.get(section, {}):
                data[section]["password"] = "***REDACTED***"

        if path.suffix in (".toml", ".tml"):
            # Basic TOML serialization
            lines = []
            for key, value in data.items():
                if isinstance(value, dict):
                    lines.append(f"\n[{key}]")
                    for k, v in value.items():
                        lines.append(f"{k} = {json.dumps(v)}")
                else:
                    lines.append(f"{key} = {json.dumps(value)}")
            path.write_text("\n".join(lines).lstrip() + "\n")
        else:
            path.write_text(json.dumps(data, indent=2))

    def validate_connections(self) -> list[str]:
        """Validate that required connection settings are present. Returns list of errors."""
        errors = []
        if not self.oracle.dsn:
            errors.append("oracle.dsn is required")
        if not self.oracle.user:
            errors.append("oracle.user is required")
        if not self.mysql.host:
            errors.append("mysql.host is required")
        if not self.mysql.user:
            errors.append("mysql.user is required")
        if not self.mysql.database:
            errors.append("mysql.database is required")
        return errors


# Convenience function for loading settings
def load_settings(
    config_file: Path | str | None = None,
    **overrides: Any,
) -> Settings:
    """
    Load settings with optional config file and overrides.

    Args:
        config_file: Optional path to config file
        **overrides: Settings to override (highest priority)

    Returns:
        Configured Settings instance
    """
    if config_file:
        settings = Settings.from_file(config_file)
        if overrides:
            data = settings.model_dump()
            data.update(overrides)
            return Settings.model_validate(data)
        return settings
    return Settings(**overrides)
