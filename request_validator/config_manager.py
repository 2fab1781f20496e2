"""
Configuration management for the request validator.

Settings are resolved once, in this order:
- Defaults
- Configuration file (YAML/JSON)
- Environment variables

The loaded configuration is validated with pydantic and is not reloaded
afterwards; validators built from it keep their settings for their lifetime.
"""

import os
import json
import yaml
import threading
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union
from dataclasses import dataclass
from pydantic import BaseModel, ValidationError, Field, field_validator

from .collector import DEFAULT_MAX_BODY_SIZE, DEFAULT_MAX_KEYS
from .logging_config import setup_logging
from .validator import RequestValidator


ContentTypeName = Literal["form", "json", "application/x-www-form-urlencoded", "application/json"]


@dataclass
class ValidatorConfig:
    """Body validation settings."""
    content_type: ContentTypeName = "json"
    max_body_size: int = DEFAULT_MAX_BODY_SIZE
    max_keys: int = DEFAULT_MAX_KEYS


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    service_name: str = "request-validator"
    enable_file_logging: bool = False


class ConfigurationModel(BaseModel):
    """Pydantic model for configuration validation."""
    validation: ValidatorConfig = Field(default_factory=ValidatorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("validation")
    @classmethod
    def _check_limits(cls, value: ValidatorConfig) -> ValidatorConfig:
        if value.max_body_size <= 0:
            raise ValueError("max_body_size must be positive")
        if value.max_keys < 0:
            raise ValueError("max_keys must not be negative")
        return value

    @field_validator("logging")
    @classmethod
    def _check_level(cls, value: LoggingConfig) -> LoggingConfig:
        value.level = value.level.upper()
        if value.level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level {value.level}")
        return value


def _parse_bool(value: str) -> bool:
    return value.lower() in ['true', '1', 'yes']


class ConfigManager:
    """
    Configuration manager supporting environment variables, configuration
    files and validation.
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_file: Path to configuration file (YAML or JSON)
        """
        self.config_file_path = Path(config_file) if config_file else None
        self._config_lock = threading.RLock()
        self._config: Optional[ConfigurationModel] = None

        self.load_configuration()

    def load_configuration(self):
        """Load configuration from config file and environment variables."""
        with self._config_lock:
            config_dict = {}

            if self.config_file_path and self.config_file_path.exists():
                config_dict = self._load_config_file()

            config_dict = self._load_environment_variables(config_dict)

            try:
                self._config = ConfigurationModel(**config_dict)
            except ValidationError as e:
                raise ValueError(f"Configuration validation failed: {e}")

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        try:
            with open(self.config_file_path, 'r') as f:
                if self.config_file_path.suffix.lower() in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif self.config_file_path.suffix.lower() == '.json':
                    return json.load(f)
                else:
                    raise ValueError(f"Unsupported configuration file format: {self.config_file_path.suffix}")
        except Exception as e:
            raise ValueError(f"Failed to load configuration file {self.config_file_path}: {e}")

    def _load_environment_variables(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_mappings = {
            'REQUEST_VALIDATOR_CONTENT_TYPE': ('validation', 'content_type', str),
            'REQUEST_VALIDATOR_MAX_BODY_SIZE': ('validation', 'max_body_size', int),
            'REQUEST_VALIDATOR_MAX_KEYS': ('validation', 'max_keys', int),
            'REQUEST_VALIDATOR_LOG_LEVEL': ('logging', 'level', str),
            'REQUEST_VALIDATOR_SERVICE_NAME': ('logging', 'service_name', str),
            'REQUEST_VALIDATOR_FILE_LOGGING': ('logging', 'enable_file_logging', _parse_bool),
        }

        for env_var, (section, key, type_converter) in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                try:
                    if section not in config_dict:
                        config_dict[section] = {}

                    config_dict[section][key] = type_converter(env_value)
                except (ValueError, TypeError) as e:
                    raise ValueError(f"Invalid value for environment variable {env_var}: {env_value} ({e})")

        return config_dict

    @property
    def config(self) -> ConfigurationModel:
        """Get the current configuration."""
        with self._config_lock:
            if self._config is None:
                raise RuntimeError("Configuration not loaded")
            return self._config

    def create_validator(self) -> RequestValidator:
        """Build a RequestValidator from the loaded settings."""
        return RequestValidator.from_settings(self.config.validation)

    def setup_logging(self) -> None:
        """Apply the logging section through ``logging_config.setup_logging``."""
        logging_config = self.config.logging
        setup_logging(
            log_level=logging_config.level,
            service_name=logging_config.service_name,
            enable_file_logging=logging_config.enable_file_logging
        )


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        config_paths = [
            Path("request_validator.yml"),
            Path("request_validator.yaml"),
            Path("request_validator.json"),
        ]

        config_file = None
        for path in config_paths:
            if path.exists():
                config_file = path
                break

        _config_manager = ConfigManager(config_file)

    return _config_manager


def set_config_manager(config_manager: Optional[ConfigManager]):
    """Set the global configuration manager instance."""
    global _config_manager
    _config_manager = config_manager
