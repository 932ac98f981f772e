"""
Configuration module for the lifecycle toolkit.

Provides centralized configuration for storage, pagination and timeouts.
"""

import os
from enum import Enum
from typing import Any, Dict, Optional, Union, get_args, get_origin

from pydantic import BaseModel, Field, field_validator, model_validator


class LogLevel(str, Enum):
    """Supported log levels for the CLI."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LifecycleConfig(BaseModel):
    """Central configuration for soft delete lifecycle management.

    Configuration Sources (in order of precedence):
        1. Programmatic settings (highest priority)
        2. Environment variables (LIFECYCLE_ prefix)
        3. Default values (lowest priority)

    Example:
        >>> config = LifecycleConfig(max_page_size=50, operation_timeout_seconds=2)

        Loading from environment:

        >>> os.environ['LIFECYCLE_MAX_PAGE_SIZE'] = '50'
        >>> config = LifecycleConfig.from_env()

    Environment Variables:
        - LIFECYCLE_DATABASE_URL
        - LIFECYCLE_DEFAULT_PAGE_SIZE
        - LIFECYCLE_MAX_PAGE_SIZE
        - LIFECYCLE_OPERATION_TIMEOUT_SECONDS
        - LIFECYCLE_BATCH_TIMEOUT_SECONDS
    """

    # General settings
    application_name: str = Field(
        "Lifecycle Manager", description="Name of the application for audit trails"
    )
    environment: str = Field(
        "production", description="Environment (development, staging, production)"
    )
    log_level: LogLevel = Field(LogLevel.INFO, description="Log level for the CLI")

    # Storage settings
    database_url: str = Field(
        "sqlite+aiosqlite:///./lifecycle.db", description="SQLAlchemy async database URL"
    )

    # Pagination settings
    default_page_size: int = Field(
        10, description="Page size used when none is requested", ge=1
    )
    max_page_size: int = Field(
        100, description="Upper bound for requested page sizes", ge=1, le=1000
    )

    # Timeouts
    operation_timeout_seconds: float = Field(
        5.0, description="Timeout for a single storage operation", gt=0
    )
    batch_timeout_seconds: float = Field(
        60.0, description="Deadline for a whole bulk operation", gt=0
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is valid."""
        valid_environments = {"development", "staging", "production", "testing"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Environment must be one of: {', '.join(sorted(valid_environments))}"
            )
        return v.lower()

    @model_validator(mode="after")
    def validate_page_sizes(self) -> "LifecycleConfig":
        """Default page size must fit within the maximum."""
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size ({self.default_page_size}) cannot exceed "
                f"max_page_size ({self.max_page_size})"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_env(cls, prefix: str = "LIFECYCLE_") -> "LifecycleConfig":
        """
        Load configuration from environment variables.

        Args:
            prefix: Prefix for environment variables

        Returns:
            Configuration instance
        """
        config_dict: Dict[str, Any] = {}

        for field_name, field_info in cls.model_fields.items():
            env_var = f"{prefix}{field_name.upper()}"
            if env_var not in os.environ:
                continue

            value = os.environ[env_var]
            field_type = field_info.annotation

            # Handle Optional types
            if get_origin(field_type) is Union:
                args = get_args(field_type)
                field_type = next((arg for arg in args if arg is not type(None)), str)

            try:
                if field_type == bool:
                    config_dict[field_name] = value.lower() in ("true", "1", "yes", "on")
                elif field_type == int:
                    config_dict[field_name] = int(value)
                elif field_type == float:
                    config_dict[field_name] = float(value)
                elif isinstance(field_type, type) and issubclass(field_type, Enum):
                    config_dict[field_name] = field_type(value.upper())
                else:
                    config_dict[field_name] = value
            except (ValueError, TypeError):
                # Let model validation report the raw value
                config_dict[field_name] = value

        return cls.model_validate(config_dict)


# Global configuration instance
_config: Optional[LifecycleConfig] = None


def get_config() -> LifecycleConfig:
    """
    Get the global configuration instance.

    Returns:
        Global configuration
    """
    global _config

    if _config is None:
        _config = LifecycleConfig.from_env()

    return _config


def set_config(config: Optional[LifecycleConfig]) -> None:
    """
    Set the global configuration instance.

    Args:
        config: Configuration to set, None to reload from the environment
    """
    global _config
    _config = config


def configure(**kwargs: Any) -> LifecycleConfig:
    """
    Configure the toolkit with keyword arguments.

    Args:
        **kwargs: Configuration parameters

    Returns:
        Updated configuration
    """
    global _config

    if _config is None:
        _config = LifecycleConfig(**kwargs)
    else:
        config_dict = _config.model_dump()
        config_dict.update(kwargs)
        _config = LifecycleConfig(**config_dict)

    return _config
