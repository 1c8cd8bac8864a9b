"""
Runtime configuration for the registrar.

Settings come from an optional JSON file; command-line flags override it.
"""

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from .core.enums import DEFAULT_MAX_CREDITS
from .core.exceptions import ConfigurationError

# Names understood by both the logging module and uvicorn.
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RegistrarConfig(BaseModel):
    data_dir: str = "data"
    backup_dir: str = "backups"
    max_credits: int = Field(DEFAULT_MAX_CREDITS, ge=1)
    log_level: str = "INFO"
    rest_host: str = "127.0.0.1"
    rest_port: int = Field(8000, ge=1, le=65535)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level '{value}', expected one of {', '.join(LOG_LEVELS)}")
        return level


def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> RegistrarConfig:
    """Build the configuration from a JSON file plus non-None overrides."""
    data: Dict[str, Any] = {}
    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must hold a JSON object")

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    try:
        return RegistrarConfig(**data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")
