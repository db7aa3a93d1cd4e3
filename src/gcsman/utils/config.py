"""Configuration utilities for gcsman."""

import copy
import os
from pathlib import Path
from typing import Any, Dict, List

import yaml
from rich.console import Console

console = Console()

CONFIG_DIR = Path.home() / ".gcsman"
CONFIG_FILE_YAML = CONFIG_DIR / "config.yaml"

# Default storage client configuration
DEFAULT_CLIENT_CONFIG = {
    "api_endpoint": "https://storage.googleapis.com/storage/v1",
    "timeout_seconds": 30.0,
    "user_project": None,
    "access_token": None,
    "max_retries": 3,
    "retry_base_delay": 1.0,
    "retry_max_delay": 60.0,
}

# Default bulk operation configuration
DEFAULT_BULK_CONFIG = {
    "concurrency_limit": 10,
    "force": False,
    "prefetch": True,
}

# Default logging configuration
DEFAULT_LOGGING_CONFIG = {
    "level": "WARNING",
    "format": "detailed",  # Options: "simple", "detailed", "json"
    "enable_file_logging": False,
    "log_directory": "~/.gcsman/logs",
}


class Config:
    """Manages gcsman configuration stored as YAML."""

    def __init__(self):
        """Initialize the configuration manager."""
        self.config_data: Dict[str, Any] = {}
        self._config_loaded = False
        self._config_dir_ensured = False

    def _ensure_config_dir(self):
        """Ensure the configuration directory exists."""
        if not self._config_dir_ensured:
            config_dir = getattr(self, "_config_dir", CONFIG_DIR)
            if not config_dir.exists():
                config_dir.mkdir(parents=True)
            self._config_dir_ensured = True

    def _ensure_config_loaded(self):
        """Ensure configuration is loaded from file."""
        if not self._config_loaded:
            self._load_config()
            self._config_loaded = True

    def reload_config(self):
        """Force reload configuration from file."""
        self._config_loaded = False
        self._ensure_config_loaded()

    def _load_config(self):
        """Load configuration from the YAML file, if present."""
        config_file_yaml = self.get_config_file_path()
        if not config_file_yaml.exists():
            self.config_data = {}
            return

        try:
            with open(config_file_yaml, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            console.print(
                f"[red]Error: Configuration file {config_file_yaml} is not valid YAML: {e}[/red]"
            )
            self.config_data = {}
            return
        except OSError as e:
            console.print(f"[red]Error reading configuration file {config_file_yaml}: {e}[/red]")
            self.config_data = {}
            return

        if not isinstance(loaded, dict):
            console.print(
                f"[yellow]Warning: Ignoring configuration file {config_file_yaml}: "
                "top level must be a mapping[/yellow]"
            )
            loaded = {}
        self.config_data = loaded

    def save_config(self):
        """Save the configuration to YAML file."""
        self._ensure_config_dir()
        config_file_yaml = self.get_config_file_path()
        try:
            with open(config_file_yaml, "w", encoding="utf-8") as f:
                yaml.dump(self.config_data, f, default_flow_style=False, indent=2, sort_keys=False)
        except OSError as e:
            console.print(f"[red]Error saving configuration: {e}[/red]")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value with dot notation support.

        Args:
            key: Configuration key (supports dot notation like "bulk.concurrency_limit")
            default: Default value if key doesn't exist

        Returns:
            Configuration value
        """
        self._ensure_config_loaded()

        value: Any = self.config_data
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default
        return value

    def set(self, key: str, value: Any):
        """
        Set a configuration value using dot notation and save.

        Args:
            key: Configuration key (e.g. "client.timeout_seconds")
            value: Configuration value
        """
        self._ensure_config_loaded()

        parts = key.split(".")
        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

        self.save_config()

    def set_section(self, section: str, value: Any):
        """
        Set a configuration section, merging with existing values.

        Args:
            section: Configuration section name
            value: Configuration section value
        """
        self._ensure_config_loaded()

        existing_section = self.config_data.get(section, {})
        if isinstance(existing_section, dict) and isinstance(value, dict):
            self.config_data[section] = self._deep_merge(existing_section, value)
        else:
            self.config_data[section] = value

        self.save_config()

    def _deep_merge(self, dict1: Dict[str, Any], dict2: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, values from ``dict2`` winning."""
        result = dict1.copy()
        for key, value in dict2.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def delete(self, key: str):
        """
        Delete a top-level configuration value.

        Args:
            key: Configuration key
        """
        self._ensure_config_loaded()
        if key in self.config_data:
            del self.config_data[key]
            self.save_config()

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        self._ensure_config_loaded()
        return self.config_data.copy()

    def get_client_config(self) -> Dict[str, Any]:
        """
        Get storage client configuration with defaults and environment variable overrides.

        Returns:
            Client configuration dictionary
        """
        self._ensure_config_loaded()
        client_config = copy.deepcopy(DEFAULT_CLIENT_CONFIG)

        file_client_config = self.config_data.get("client", {})
        if isinstance(file_client_config, dict):
            client_config.update(file_client_config)

        client_config["api_endpoint"] = os.environ.get(
            "GCSMAN_API_ENDPOINT", client_config["api_endpoint"]
        )
        client_config["user_project"] = os.environ.get(
            "GCSMAN_USER_PROJECT", client_config["user_project"]
        )
        client_config["access_token"] = os.environ.get(
            "GCSMAN_ACCESS_TOKEN", client_config["access_token"]
        )
        client_config["timeout_seconds"] = self._get_env_float(
            "GCSMAN_TIMEOUT_SECONDS", client_config["timeout_seconds"]
        )
        client_config["max_retries"] = self._get_env_int(
            "GCSMAN_MAX_RETRIES", client_config["max_retries"]
        )

        return client_config

    def get_bulk_config(self) -> Dict[str, Any]:
        """
        Get bulk operation configuration with defaults and environment variable overrides.

        Returns:
            Bulk configuration dictionary
        """
        self._ensure_config_loaded()
        bulk_config = copy.deepcopy(DEFAULT_BULK_CONFIG)

        file_bulk_config = self.config_data.get("bulk", {})
        if isinstance(file_bulk_config, dict):
            bulk_config.update(file_bulk_config)

        bulk_config["concurrency_limit"] = self._get_env_int(
            "GCSMAN_BULK_CONCURRENCY_LIMIT", bulk_config["concurrency_limit"]
        )
        bulk_config["force"] = self._get_env_bool("GCSMAN_BULK_FORCE", bulk_config["force"])
        bulk_config["prefetch"] = self._get_env_bool(
            "GCSMAN_BULK_PREFETCH", bulk_config["prefetch"]
        )

        return bulk_config

    def get_logging_config(self) -> Dict[str, Any]:
        """
        Get logging configuration with defaults and environment variable overrides.

        Returns:
            Logging configuration dictionary
        """
        self._ensure_config_loaded()
        logging_config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)

        file_logging_config = self.config_data.get("logging", {})
        if isinstance(file_logging_config, dict):
            logging_config.update(file_logging_config)

        logging_config["level"] = os.environ.get("GCSMAN_LOG_LEVEL", logging_config["level"])
        logging_config["log_directory"] = os.path.expanduser(logging_config["log_directory"])

        return logging_config

    def _get_env_bool(self, env_var: str, default: bool) -> bool:
        """
        Get boolean value from environment variable.

        Args:
            env_var: Environment variable name
            default: Default value if env var is not set

        Returns:
            Boolean value
        """
        value = os.environ.get(env_var)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def _get_env_int(self, env_var: str, default: int) -> int:
        """
        Get integer value from environment variable.

        Args:
            env_var: Environment variable name
            default: Default value if env var is not set

        Returns:
            Integer value
        """
        value = os.environ.get(env_var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            console.print(
                f"Warning: Invalid integer value for {env_var}: {value}. Using default: {default}"
            )
            return default

    def _get_env_float(self, env_var: str, default: float) -> float:
        value = os.environ.get(env_var)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            console.print(
                f"Warning: Invalid number for {env_var}: {value}. Using default: {default}"
            )
            return default

    def validate_bulk_config(self, bulk_config: Dict[str, Any] = None) -> List[str]:
        """
        Validate bulk operation configuration.

        Args:
            bulk_config: Bulk configuration to validate (uses current if None)

        Returns:
            List of validation error messages (empty if valid)
        """
        if bulk_config is None:
            bulk_config = self.get_bulk_config()

        errors = []

        limit = bulk_config.get("concurrency_limit")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            errors.append(f"bulk.concurrency_limit must be a positive integer, got {limit!r}")

        for flag in ("force", "prefetch"):
            if not isinstance(bulk_config.get(flag), bool):
                errors.append(f"bulk.{flag} must be a boolean, got {bulk_config.get(flag)!r}")

        return errors

    def get_config_file_path(self) -> Path:
        """
        Get the path to the configuration file.

        Returns:
            Path to the YAML configuration file
        """
        return getattr(self, "_config_file_yaml", CONFIG_FILE_YAML)
