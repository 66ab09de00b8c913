"""
Configuration module for the Bakery CMS persistence core.

Provides centralized configuration for the database connection, logging and
the soft delete behaviour shared by every repository.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional, Union, get_args, get_origin

from pydantic import BaseModel, Field, field_validator
from rich.logging import RichHandler


class LogFormat(str, Enum):
    """Supported log output formats."""

    RICH = "rich"
    PLAIN = "plain"


class BakeryConfig(BaseModel):
    """Central configuration for the Bakery CMS persistence core.

    Configuration can be set programmatically or loaded from environment
    variables carrying the ``BAKERY_`` prefix.

    Configuration Sources (in order of precedence):
        1. Programmatic settings (highest priority)
        2. Environment variables (BAKERY_ prefix)
        3. Default values (lowest priority)

    Example:
        >>> config = BakeryConfig(database_url="sqlite:///bakery.db")
        >>> import os
        >>> os.environ["BAKERY_DATABASE_ECHO"] = "true"
        >>> config = BakeryConfig.from_env()

    Environment Variables:
        - BAKERY_DATABASE_URL
        - BAKERY_DATABASE_ECHO
        - BAKERY_LOG_LEVEL
        - BAKERY_CASCADE_DELETE_ENABLED
        - BAKERY_ENFORCE_ACTIVE_UNIQUENESS
    """

    # General settings
    application_name: str = Field(
        "Bakery CMS", description="Name of the application for log records"
    )
    environment: str = Field(
        "production", description="Environment (development, test, staging, production)"
    )

    # Database settings
    database_url: str = Field(
        "sqlite:///bakery.db", description="SQLAlchemy database URL"
    )
    database_echo: bool = Field(False, description="Echo SQL statements to the log")
    database_pool_size: int = Field(
        5, description="Connection pool size (ignored for SQLite)", gt=0, le=100
    )

    # Logging settings
    log_level: str = Field("INFO", description="Root log level")
    log_format: LogFormat = Field(LogFormat.RICH, description="Log output format")

    # Soft delete settings
    cascade_delete_enabled: bool = Field(
        True, description="Propagate soft deletes through the cascade graph"
    )
    enforce_active_uniqueness: bool = Field(
        True, description="Reject a second active row for the same business key"
    )
    allow_hard_delete_of_active: bool = Field(
        False,
        description="Allow physical deletes of active rows outside the force path",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is valid."""
        valid_environments = {"development", "test", "staging", "production"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Environment must be one of: {', '.join(sorted(valid_environments))}"
            )
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the log level is one the logging module knows."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite."""
        return self.database_url.startswith("sqlite")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_env(cls, prefix: str = "BAKERY_") -> "BakeryConfig":
        """
        Load configuration from environment variables.

        Args:
            prefix: Prefix for environment variables

        Returns:
            Configuration instance
        """
        import os

        config_dict: Dict[str, Any] = {}

        for field_name, field_info in cls.model_fields.items():
            env_var = f"{prefix}{field_name.upper()}"
            if env_var not in os.environ:
                continue

            value = os.environ[env_var]
            field_type = field_info.annotation

            # Optional[T] -> T
            if get_origin(field_type) is Union:
                args = get_args(field_type)
                field_type = next((arg for arg in args if arg is not type(None)), str)

            if field_type is bool:
                config_dict[field_name] = value.lower() in ("true", "1", "yes", "on")
            elif field_type is int:
                config_dict[field_name] = int(value)
            elif isinstance(field_type, type) and issubclass(field_type, Enum):
                config_dict[field_name] = field_type(value)
            else:
                config_dict[field_name] = value

        return cls.model_validate(config_dict)


# Global configuration instance
_config: Optional[BakeryConfig] = None


def get_config() -> BakeryConfig:
    """
    Get the global configuration instance.

    Returns:
        Global configuration
    """
    global _config

    if _config is None:
        _config = BakeryConfig.from_env()

    return _config


def set_config(config: Optional[BakeryConfig]) -> None:
    """
    Set the global configuration instance.

    Args:
        config: Configuration to set, or None to reload from the environment
            on next access
    """
    global _config
    _config = config


def configure(**kwargs: Any) -> BakeryConfig:
    """
    Configure the package with keyword arguments.

    Args:
        **kwargs: Configuration parameters

    Returns:
        Updated configuration
    """
    global _config

    if _config is None:
        _config = BakeryConfig(**kwargs)
    else:
        config_dict = _config.model_dump()
        config_dict.update(kwargs)
        _config = BakeryConfig(**config_dict)

    return _config


def configure_logging(config: Optional[BakeryConfig] = None) -> None:
    """
    Install a root log handler according to the configuration.

    Args:
        config: Configuration to use; defaults to the global configuration
    """
    config = config or get_config()

    if config.log_format == LogFormat.RICH:
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
        fmt = "%(message)s"
    else:
        handler = logging.StreamHandler()
        fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    logging.basicConfig(level=config.log_level, format=fmt, handlers=[handler], force=True)

    if config.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
