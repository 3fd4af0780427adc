"""Configuration management for envgate using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CONFIG_FILE_NAME = ".envgate.json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class PolicyKind(str, Enum):
    """Policy kinds that can be declared in configuration."""
    BOOLEAN = "boolean"
    ENUM = "enum"
    IP = "ip"
    URL = "url"
    RANGE = "range"


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.INFO

    model_config = ConfigDict(use_enum_values=True)


class PolicySpec(BaseModel):
    """Declarative description of a caller-supplied policy."""
    kind: PolicyKind
    key: str
    accepted_values: list[str] = Field(alias="acceptedValues", default_factory=list)
    allowed_values: list[str] = Field(alias="allowedValues", default_factory=list)
    case_sensitive: bool = Field(alias="caseSensitive", default=True)
    allowed_versions: list[str] = Field(alias="allowedVersions", default_factory=list)
    must_be_private: bool = Field(alias="mustBePrivate", default=False)
    allowed_schemes: list[str] = Field(alias="allowedSchemes", default_factory=list)
    minimum: int | None = None
    maximum: int | None = None

    @field_validator("key")
    @classmethod
    def validate_key(cls, v):
        if not v.strip():
            raise ValueError("policy key must not be empty")
        return v

    @field_validator("allowed_versions")
    @classmethod
    def validate_allowed_versions(cls, v):
        valid_versions = ["ipv4", "ipv6"]
        for version in v:
            if version.lower() not in valid_versions:
                raise ValueError(f"allowed_versions entries must be IPv4 or IPv6, got: {version}")
        return v

    @model_validator(mode="after")
    def validate_kind_parameters(self):
        if self.kind == PolicyKind.ENUM and not self.allowed_values:
            raise ValueError(f"enum policy for {self.key} requires allowedValues")
        if self.kind == PolicyKind.RANGE:
            if self.minimum is None and self.maximum is None:
                raise ValueError(f"range policy for {self.key} requires minimum or maximum")
            if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
                raise ValueError(f"range policy for {self.key} has minimum > maximum")
        return self

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class ValidatorConfig(BaseModel):
    """Complete envgate configuration model."""
    required_keys: list[str] = Field(alias="requiredKeys", default_factory=list)
    require_quotes: bool = Field(alias="requireQuotes", default=False)
    verbose: bool = False
    policies: list[PolicySpec] = Field(default_factory=list)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


def load_config(config_path: str | Path | None = None) -> ValidatorConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .envgate.json
                    and falls back to defaults when none is found

    Returns:
        ValidatorConfig: Loaded and validated configuration

    Raises:
        FileNotFoundError: If config file specified but not found
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return ValidatorConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")
    else:
        return create_default_config()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .envgate.json configuration file by searching up directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> ValidatorConfig:
    """Create default configuration: no required keys, built-in policies only."""
    return ValidatorConfig()
