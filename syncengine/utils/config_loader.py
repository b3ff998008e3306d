"""Configuration loader for the snapshot sync engine."""

import os
import re
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from syncengine.models.config import AppConfig

log = structlog.stdlib.get_logger()

ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")
DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "config"


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""


class ConfigLoader:
    """Loads and validates configuration from YAML files and environment variables."""

    def __init__(self, config_dir: str | Path | None = None) -> None:
        """
        Initialize the ConfigLoader.

        Args:
            config_dir: Directory holding <env>.yaml files (repository config/ if None)
        """
        self._config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR

    def load_config(self, config_path: str | None = None) -> AppConfig:
        """Load configuration from a YAML file with ${VAR} substitution.

        Args:
            config_path: Path to the YAML file. If None, uses config/<SYNC_ENV>.yaml
                falling back to config/default.yaml

        Returns:
            AppConfig: Validated application configuration

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        if config_path is None:
            config_path = self._get_default_config_path()

        log.info("loading_configuration", config_path=config_path)

        config_dict = self._load_yaml_file(config_path)
        config_dict = self._substitute_env_vars(config_dict)

        try:
            app_config = AppConfig(**config_dict)
        except ValidationError as e:
            log.error("configuration_validation_failed", error=str(e))
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        log.info("configuration_loaded_successfully", source_type=app_config.remote.type)
        return app_config

    def _get_default_config_path(self) -> str:
        env = os.getenv("SYNC_ENV", "default")
        config_file = self._config_dir / f"{env}.yaml"

        if not config_file.exists():
            config_file = self._config_dir / "default.yaml"

        if not config_file.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_file}. "
                f"Create config/default.yaml or set SYNC_ENV to a valid environment."
            )

        return str(config_file)

    def _load_yaml_file(self, config_path: str) -> dict[str, Any]:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {config_path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML file {config_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file {config_path}: {e}") from e

        if config_dict is None:
            raise ConfigurationError(f"Configuration file is empty: {config_path}")
        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        log.debug("yaml_file_loaded", config_path=config_path)
        return config_dict

    def _substitute_env_vars(self, config: Any) -> Any:
        """Recursively replace ${VAR_NAME} references with environment values."""
        if isinstance(config, dict):
            return {key: self._substitute_env_vars(value) for key, value in config.items()}
        if isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]
        if isinstance(config, str):
            return self._substitute_env_var_in_string(config)
        return config

    def _substitute_env_var_in_string(self, value: str) -> str:
        for var_name in ENV_VAR_PATTERN.findall(value):
            env_value = os.getenv(var_name)
            if env_value is None:
                raise ConfigurationError(
                    f"Required environment variable not set: {var_name}. "
                    f"Please set {var_name} in your environment or .env file."
                )
            value = value.replace(f"${{{var_name}}}", env_value)

        return value

    def validate_config(self, config: AppConfig) -> list[str]:
        """Return warnings for settings that are valid but likely mistakes.

        Args:
            config: Application configuration to validate

        Returns:
            List of warning messages (empty if no warnings)
        """
        warnings = []
        retry = config.retry

        if config.remote.type == "http" and config.remote.request_timeout > retry.per_attempt_timeout:
            warnings.append(
                f"remote.request_timeout ({config.remote.request_timeout}s) exceeds "
                f"retry.per_attempt_timeout ({retry.per_attempt_timeout}s); timed-out requests "
                f"keep running in the background until the socket timeout"
            )

        supported_sources = ["http", "simulated"]
        if config.remote.type not in supported_sources:
            warnings.append(
                f"remote.type '{config.remote.type}' is not supported. "
                f"Supported types: {supported_sources}"
            )

        if retry.backoff_multiplier > 1.0 and retry.max_backoff_delay < retry.backoff_delay:
            warnings.append(
                f"retry.max_backoff_delay ({retry.max_backoff_delay}s) is lower than "
                f"retry.backoff_delay ({retry.backoff_delay}s); every exponential delay will be capped"
            )

        if warnings:
            log.warning("configuration_validation_warnings", warnings=warnings)

        return warnings
