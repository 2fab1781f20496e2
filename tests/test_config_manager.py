"""
Tests for the configuration management system.
"""

import os
import json
import yaml
import pytest
import tempfile
from pathlib import Path
from unittest.mock import patch

from request_validator.config_manager import (
    ConfigManager,
    ConfigurationModel,
    LoggingConfig,
    ValidatorConfig,
    get_config_manager,
    set_config_manager
)
from request_validator.validator import RequestValidator


class TestConfigurationModels:
    """Test configuration data models."""

    def test_validator_config_defaults(self):
        """Test default validator configuration."""
        config = ValidatorConfig()
        assert config.content_type == "json"
        assert config.max_body_size == 1_000_000
        assert config.max_keys == 1000

    def test_logging_config_defaults(self):
        """Test default logging configuration."""
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.service_name == "request-validator"
        assert config.enable_file_logging is False


class TestConfigurationValidation:
    """Test configuration validation with pydantic."""

    def test_valid_configuration(self):
        """Test a valid configuration dictionary."""
        model = ConfigurationModel(
            validation={"content_type": "form", "max_body_size": 2048},
            logging={"level": "debug"}
        )
        assert model.validation.content_type == "form"
        assert model.validation.max_body_size == 2048
        assert model.logging.level == "DEBUG"

    def test_unknown_content_type(self):
        """Test unsupported content type fails validation."""
        with pytest.raises(Exception):
            ConfigurationModel(validation={"content_type": "xml"})

    def test_non_positive_body_size(self):
        """Test zero body size fails validation."""
        with pytest.raises(Exception, match="max_body_size must be positive"):
            ConfigurationModel(validation={"max_body_size": 0})

    def test_unknown_log_level(self):
        """Test bogus log level fails validation."""
        with pytest.raises(Exception, match="Unknown log level"):
            ConfigurationModel(logging={"level": "chatty"})


class TestConfigManager:
    """Test ConfigManager loading."""

    def test_defaults_without_file(self):
        """Test manager without a config file uses defaults."""
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager()
        assert manager.config.validation.content_type == "json"
        assert manager.config.validation.max_body_size == 1_000_000

    def test_yaml_file(self):
        """Test loading from a YAML file."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "request_validator.yml"
            path.write_text(yaml.safe_dump({"validation": {"content_type": "form", "max_body_size": 4096}}))

            with patch.dict(os.environ, {}, clear=True):
                manager = ConfigManager(path)

        assert manager.config.validation.content_type == "form"
        assert manager.config.validation.max_body_size == 4096

    def test_json_file(self):
        """Test loading from a JSON file."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "request_validator.json"
            path.write_text(json.dumps({"validation": {"max_keys": 10}, "logging": {"level": "WARNING"}}))

            with patch.dict(os.environ, {}, clear=True):
                manager = ConfigManager(path)

        assert manager.config.validation.max_keys == 10
        assert manager.config.logging.level == "WARNING"

    def test_unsupported_file_format(self):
        """Test unsupported config file extension."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.toml"
            path.write_text("[validation]\n")

            with pytest.raises(ValueError, match="Unsupported configuration file format"):
                ConfigManager(path)

    def test_environment_overrides_file(self):
        """Test environment variables override file values."""
        env = {
            "REQUEST_VALIDATOR_CONTENT_TYPE": "application/json",
            "REQUEST_VALIDATOR_MAX_BODY_SIZE": "256",
            "REQUEST_VALIDATOR_FILE_LOGGING": "yes",
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "request_validator.yaml"
            path.write_text(yaml.safe_dump({"validation": {"content_type": "form", "max_body_size": 4096}}))

            with patch.dict(os.environ, env, clear=True):
                manager = ConfigManager(path)

        assert manager.config.validation.content_type == "application/json"
        assert manager.config.validation.max_body_size == 256
        assert manager.config.logging.enable_file_logging is True

    def test_invalid_environment_value(self):
        """Test non numeric body size in the environment."""
        with patch.dict(os.environ, {"REQUEST_VALIDATOR_MAX_BODY_SIZE": "lots"}, clear=True):
            with pytest.raises(ValueError, match="REQUEST_VALIDATOR_MAX_BODY_SIZE"):
                ConfigManager()

    def test_invalid_configuration_value(self):
        """Test validation failure surfaces as ValueError."""
        with patch.dict(os.environ, {"REQUEST_VALIDATOR_CONTENT_TYPE": "xml"}, clear=True):
            with pytest.raises(ValueError, match="Configuration validation failed"):
                ConfigManager()

    def test_create_validator(self):
        """Test building a validator from loaded settings."""
        env = {"REQUEST_VALIDATOR_CONTENT_TYPE": "form", "REQUEST_VALIDATOR_MAX_BODY_SIZE": "100"}
        with patch.dict(os.environ, env, clear=True):
            validator = ConfigManager().create_validator()

        assert isinstance(validator, RequestValidator)
        assert validator.content_type == "application/x-www-form-urlencoded"
        assert validator.max_body_size == 100


class TestGlobalConfigManager:
    """Test the module level configuration manager."""

    def test_get_and_set(self):
        """Test global manager can be replaced and lazily rebuilt."""
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager()
            set_config_manager(manager)
            assert get_config_manager() is manager

            set_config_manager(None)
            rebuilt = get_config_manager()
            assert isinstance(rebuilt, ConfigManager)
            assert rebuilt is not manager

        set_config_manager(None)
