"""Client settings: YAML config file, environment variables and CLI overrides."""

import logging
import os
from dataclasses import dataclass, fields

import yaml

from azdock.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.azdock/config.yaml"
DEFAULT_API_URL = "https://management.core.windows.net"
API_VERSION = "2014-10-01"

# Environment variable -> settings field
_ENV_VARS = {
    "AZURE_SUBSCRIPTION_ID": "subscription_id",
    "AZURE_MANAGEMENT_CERT": "management_cert",
    "AZURE_MANAGEMENT_URL": "api_url",
}


@dataclass
class AzureSettings:
    """Everything the transport needs to reach the management API."""

    subscription_id: str = ""
    management_cert: str = ""  # PEM file holding the management certificate and its key
    api_url: str = DEFAULT_API_URL
    api_version: str = API_VERSION
    poll_interval: float = 5
    operation_timeout: float = 1800

    def validate(self) -> None:
        """Raise ConfigError if a required field is missing."""
        if not self.subscription_id:
            raise ConfigError("Azure subscription ID required. Use --subscription-id or set AZURE_SUBSCRIPTION_ID.")
        if not self.management_cert:
            raise ConfigError("Management certificate required. Use --management-cert or set AZURE_MANAGEMENT_CERT.")
        if not os.path.exists(self.management_cert):
            raise ConfigError(f"Management certificate not found: {self.management_cert}")

    def validate_timing(self) -> None:
        """Raise ConfigError unless polling interval and timeout are positive numbers."""
        for name in ("poll_interval", "operation_timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{name} must be a number, got {value!r}")
            if value <= 0:
                raise ConfigError(f"{name} must be greater than 0, got {value}")


def _expand_path(path: str) -> str:
    """Expand user home directory and environment variables in path."""
    return os.path.expanduser(os.path.expandvars(path))


def load_config_file(config_path: str | None = None) -> dict:
    """Load the YAML config file.

    An explicit *config_path* must exist; the default path is optional.
    """
    path = _expand_path(config_path or DEFAULT_CONFIG_PATH)
    if not os.path.exists(path):
        if config_path:
            raise ConfigError(f"Config file '{config_path}' not found.")
        return {}

    try:
        with open(path) as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML config {path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    logger.debug(f"Loaded settings from {path}")
    return config


def load_settings(config_path: str | None = None, dry_run: bool = False, **overrides) -> AzureSettings:
    """Merge defaults, config file, environment and *overrides* (highest precedence).

    ``None`` overrides are ignored so argparse defaults do not mask lower layers.
    Validation is skipped in dry-run mode.
    """
    known = {f.name for f in fields(AzureSettings)}
    values = {}

    for key, value in load_config_file(config_path).items():
        if key not in known:
            logger.warning(f"Warning: ignoring unknown config key '{key}'")
            continue
        values[key] = value

    for var, key in _ENV_VARS.items():
        env_value = os.environ.get(var)
        if env_value:
            values[key] = env_value

    values.update({k: v for k, v in overrides.items() if v is not None})

    settings = AzureSettings(**values)
    if settings.management_cert:
        settings.management_cert = _expand_path(settings.management_cert)
    settings.validate_timing()
    if not dry_run:
        settings.validate()
    return settings
