"""Configuration management for the updates client."""

from __future__ import annotations

import os
from typing import Any

import yaml
from dotenv import load_dotenv

DEFAULT_UPDATES_PATH = "/api/updates"
BASE_URL_ENV = "BACKEND_BASE_URL"


class Configuration:
    """Manages configuration and environment variables for the updates client."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables.

        Args:
            config_path: YAML file to load. Defaults to ``config.yaml``
                next to this module.
        """
        self.load_env()
        self._config_path = config_path or os.path.join(
            os.path.dirname(__file__), "config.yaml"
        )
        self._config = self._load_yaml_config()

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self._config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    @property
    def backend_base_url(self) -> str:
        """Get the backend base URL.

        Returns:
            ``BACKEND_BASE_URL`` from the environment if set, otherwise
            ``backend.base_url`` from YAML.

        Raises:
            ValueError: If neither is configured.
        """
        env_url = os.getenv(BASE_URL_ENV)
        if env_url:
            return env_url

        base_url = self._config.get("backend", {}).get("base_url")
        if not base_url:
            raise ValueError(
                f"backend.base_url must be configured in config.yaml "
                f"or via {BASE_URL_ENV}"
            )
        return base_url

    def _get_updates_config(self) -> dict[str, Any]:
        return self._config.get("updates", {})

    def get_updates_path(self) -> str:
        """Get the path of the updates stream endpoint."""
        return self._get_updates_config().get("path", DEFAULT_UPDATES_PATH)

    def get_reconnect_config(self) -> dict[str, Any]:
        """Get reconnection configuration from YAML.

        Returns:
            Reconnect configuration dictionary with validated values.

        Raises:
            ValueError: If required reconnect parameters are missing or invalid.
        """
        reconnect_config = self._get_updates_config().get("reconnect", {})

        required_keys = ["max_attempts", "backoff_base", "max_delay"]
        for key in required_keys:
            if key not in reconnect_config:
                raise ValueError(
                    f"updates.reconnect.{key} must be explicitly configured "
                    "in config.yaml"
                )

        if reconnect_config["max_attempts"] < 0:
            raise ValueError("max_attempts must be >= 0")
        if reconnect_config["backoff_base"] <= 1:
            raise ValueError("backoff_base must be greater than 1")
        if reconnect_config["max_delay"] <= 0:
            raise ValueError("max_delay must be positive")

        return reconnect_config

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client configuration for the updates stream.

        Returns:
            HTTP client configuration dictionary with validated values.

        Raises:
            ValueError: If required HTTP client parameters are missing or invalid.
        """
        http_config = self._get_updates_config().get("http_client", {})

        required_keys = ["connect_timeout", "write_timeout", "pool_timeout"]
        for key in required_keys:
            if key not in http_config:
                raise ValueError(
                    f"updates.http_client.{key} must be explicitly configured "
                    "in config.yaml"
                )
            if http_config[key] <= 0:
                raise ValueError(f"updates.http_client.{key} must be positive")

        return http_config

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration, defaulting to INFO."""
        return {"level": "INFO", **self._config.get("logging", {})}
