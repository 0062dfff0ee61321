"""
Configuration Management for the Relationship Generator
Uses Pydantic for validation and type safety
"""
from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, ValidationError

from .utils.errors import ConfigurationError
from .utils.logging import setup_logging


class DatabaseType(str, Enum):
    """Supported database types"""
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"


class LogLevel(str, Enum):
    """Log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


_DEFAULT_PORTS = {
    DatabaseType.POSTGRESQL: 5432,
    DatabaseType.MYSQL: 3306,
    DatabaseType.SQLITE: 0,
}


class DatabaseConfig(BaseModel):
    """Database connection configuration"""
    db_type: DatabaseType
    host: str = "localhost"
    port: Optional[int] = Field(default=None, ge=0, le=65535)
    database: str = ""
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    connection_timeout: int = Field(default=30, ge=1, le=300)

    # PostgreSQL specific
    ssl_mode: str = "prefer"

    # SQLite specific
    sqlite_path: Optional[str] = None

    def get_default_port(self) -> int:
        """Get default port for database type"""
        return _DEFAULT_PORTS.get(DatabaseType(self.db_type), 0)

    def effective_port(self) -> int:
        """Configured port, or the engine default when none was given"""
        return self.port if self.port is not None else self.get_default_port()

    def password_value(self) -> str:
        return self.password.get_secret_value() if self.password else ""


class GeneratorConfig(BaseModel):
    """Relationship generation options"""
    package_name: str = "models"
    exclude_tables: List[str] = Field(default_factory=list)
    max_workers: int = Field(default=1, ge=1, le=64)


class SystemConfig(BaseModel):
    """Main system configuration"""
    database: DatabaseConfig
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    log_level: LogLevel = LogLevel.INFO
    json_logs: bool = False

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "SystemConfig":
        """Create configuration from environment variables (and an optional .env file)"""
        if env_file is not None:
            load_dotenv(env_file, override=False)

        try:
            db_type = DatabaseType(os.getenv("DB_TYPE", "postgresql"))
        except ValueError as e:
            raise ConfigurationError(
                f"Unsupported database type: {os.getenv('DB_TYPE')}",
                config_key="DB_TYPE",
                original_error=e,
            ) from e

        port = os.getenv("DB_PORT")
        exclude = os.getenv("RELGEN_EXCLUDE", "")

        data: Dict[str, Any] = {
            "database": {
                "db_type": db_type,
                "host": os.getenv("DB_HOST", "localhost"),
                "port": port if port else None,
                "database": os.getenv("DB_NAME", ""),
                "username": os.getenv("DB_USER"),
                "password": os.getenv("DB_PASSWORD") or None,
                "ssl_mode": os.getenv("DB_SSLMODE", "prefer"),
                "sqlite_path": os.getenv("SQLITE_PATH"),
            },
            "generator": {
                "package_name": os.getenv("RELGEN_PACKAGE", "models"),
                "exclude_tables": [name.strip() for name in exclude.split(",") if name.strip()],
                "max_workers": os.getenv("RELGEN_WORKERS", "1"),
            },
            "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
            "json_logs": os.getenv("LOG_JSON", "false").lower() == "true",
        }
        return cls.from_dict(data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "SystemConfig":
        """Create configuration from a YAML file"""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Unable to read configuration file {path}: {e}",
                original_error=e,
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SystemConfig":
        """Validate a raw mapping, reporting failures as ConfigurationError"""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            key = ".".join(str(part) for part in first.get("loc", ()))
            raise ConfigurationError(
                f"Invalid configuration: {e.error_count()} error(s), first at '{key}': {first.get('msg', '')}",
                config_key=key or None,
                original_error=e,
            ) from e

    def configure_logging(self, log_file: Optional[str] = None) -> None:
        """Apply ``log_level`` and ``json_logs`` to the root logger"""
        setup_logging(level=self.log_level.value, json_format=self.json_logs, log_file=log_file)
