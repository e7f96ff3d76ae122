"""Configuration loading for SMSSync."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .models import EndpointStatus, SyncEndpoint


class ConfigError(ValueError):
    """Raised when the configuration file holds invalid values."""


@dataclass
class DeviceConfig:
    name: str = "smssync-device"


@dataclass
class HttpConfig:
    timeout_seconds: float = 30.0
    user_agent: str = "SMSSync-Python"


@dataclass
class ActivityLogConfig:
    """Where human-readable sync status lines are written."""

    path: str = "~/.smssync/activity.log"


@dataclass
class StoreConfig:
    """Seed data for the in-memory message store."""

    messages_path: str | None = None


@dataclass
class Config:
    device: DeviceConfig = field(default_factory=DeviceConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    activity_log: ActivityLogConfig = field(default_factory=ActivityLogConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    endpoints: list[SyncEndpoint] = field(default_factory=list)


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with SMSSYNC_ prefix."""
    return os.environ.get(f"SMSSYNC_{key}", default)


def _parse_timeout(value: Any, source: str) -> float:
    """Parse a timeout in seconds, raising ConfigError for bad values."""
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{source} must be a number: {value!r}") from e
    if timeout <= 0:
        raise ConfigError(f"{source} must be positive: {value!r}")
    return timeout


def _section(data: dict, name: str) -> dict:
    """Get a config section; an empty section counts as no values."""
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    if name := _get_env("DEVICE_NAME"):
        config.device.name = name

    if timeout := _get_env("HTTP_TIMEOUT"):
        config.http.timeout_seconds = _parse_timeout(timeout, "SMSSYNC_HTTP_TIMEOUT")

    if log_path := _get_env("ACTIVITY_LOG"):
        config.activity_log.path = log_path

    if messages_path := _get_env("MESSAGES_PATH"):
        config.store.messages_path = messages_path

    # A single endpoint from the environment replaces one with the same URL
    if url := _get_env("ENDPOINT_URL"):
        endpoint = SyncEndpoint(url=url, secret=_get_env("ENDPOINT_SECRET") or None)
        config.endpoints = [e for e in config.endpoints if e.url != url]
        config.endpoints.append(endpoint)

    return config


def _parse_endpoints(data: list) -> list[SyncEndpoint]:
    """Parse sync endpoint configurations."""
    if not isinstance(data, list):
        raise ConfigError("'endpoints' must be a list")

    endpoints = []
    for index, endpoint_data in enumerate(data):
        if not isinstance(endpoint_data, dict) or not endpoint_data.get("url"):
            raise ConfigError(f"Endpoint #{index} is missing a url")
        try:
            endpoints.append(SyncEndpoint.from_dict(endpoint_data))
        except ValueError as e:
            valid = ", ".join(s.value for s in EndpointStatus)
            raise ConfigError(
                f"Endpoint #{index} has an invalid status "
                f"{endpoint_data.get('status')!r} (expected one of: {valid})"
            ) from e
    return endpoints


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. If None, uses default config.

    Returns:
        Loaded and validated Config object.

    Raises:
        ConfigError: If the file contains invalid values.
    """
    config = Config()

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                try:
                    data = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ConfigError(f"Invalid YAML in {path}: {e}") from e

            if not isinstance(data, dict):
                raise ConfigError(f"{path} must contain a mapping")

            if "device" in data:
                device_data = _section(data, "device")
                config.device = DeviceConfig(
                    name=device_data.get("name", config.device.name)
                )

            if "http" in data:
                http_data = _section(data, "http")
                config.http = HttpConfig(
                    timeout_seconds=_parse_timeout(
                        http_data.get("timeout_seconds", config.http.timeout_seconds),
                        "http.timeout_seconds",
                    ),
                    user_agent=http_data.get("user_agent", config.http.user_agent),
                )

            if "activity_log" in data:
                config.activity_log = ActivityLogConfig(
                    path=_section(data, "activity_log").get("path", config.activity_log.path)
                )

            if "store" in data:
                config.store = StoreConfig(
                    messages_path=_section(data, "store").get("messages_path")
                )

            if "endpoints" in data:
                config.endpoints = _parse_endpoints(data["endpoints"] or [])

    return _apply_env_overrides(config)
