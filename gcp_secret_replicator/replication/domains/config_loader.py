"""Configuration loader for gcp-secret-replicator."""
import copy
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SECRET_REPLICATOR_CONFIG"
COPY_ALL_VERSIONS_ENV_VAR = "COPY_ALL_VERSIONS"
SUPPORTED_AUTH_TYPES = ("application_default", "service_account")
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

DEFAULT_CONFIG: Dict[str, Any] = {
    "authentication": {"type": "application_default"},
    "replication": {"copy_all_versions": False},
    "logging": {"log_dir": ".", "level": "INFO"},
}


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def default_config_path() -> Path:
    """XDG Base Directory location of the config file."""
    return Path.home() / ".config" / "gcp-secret-replicator" / "config.yml"


def _get_config_path(explicit_path: Optional[str] = None) -> Optional[str]:
    """
    Resolve which config file to use.

    Priority order:
    1. Explicit path (``--config``)
    2. SECRET_REPLICATOR_CONFIG environment variable
    3. Default location: ~/.config/gcp-secret-replicator/config.yml

    Returns:
        Absolute path to config file, or None if no config file is in use

    Raises:
        ConfigError: If an explicitly requested config file doesn't exist
    """
    for source, candidate in (("--config", explicit_path), (CONFIG_ENV_VAR, os.getenv(CONFIG_ENV_VAR))):
        if not candidate:
            continue
        config_path = Path(candidate).expanduser()
        if not config_path.is_file():
            raise ConfigError(f"Config file from {source} not found: {config_path}")
        logger.debug(f"Using config from {source}: {config_path}")
        return str(config_path)

    default_config = default_config_path()
    if default_config.exists():
        logger.debug(f"Using default config location: {default_config}")
        return str(default_config)

    return None


def _section(config: Dict[str, Any], name: str, config_path: str) -> Dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{name}' in config at {config_path} must be a mapping")
    return section


def _validate_authentication(auth: Dict[str, Any], config_path: str) -> None:
    auth_type = auth.get("type", "application_default")
    if auth_type not in SUPPORTED_AUTH_TYPES:
        raise ConfigError(
            f"Unsupported authentication type: {auth_type}\n"
            f"Supported types: {', '.join(SUPPORTED_AUTH_TYPES)}"
        )

    if auth_type != "service_account":
        return

    if "service_account_path" not in auth:
        raise ConfigError(
            "Missing 'authentication.service_account_path' in config\n"
            "Please specify the absolute path to your service account JSON file."
        )

    service_account_path = auth["service_account_path"]
    if not os.path.exists(service_account_path):
        raise ConfigError(
            f"Service account file not found at: {service_account_path}\n"
            f"Please ensure the file exists or update the path in {config_path}"
        )
    if not os.path.isfile(service_account_path):
        raise ConfigError(f"Service account path is not a file: {service_account_path}")


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load and validate configuration, merged over the built-in defaults.

    Args:
        config_path: Explicit config file path (optional)

    Returns:
        Dict with keys:
        - authentication: type and, for service_account, service_account_path
        - replication: copy_all_versions
        - logging: log_dir and level

    Raises:
        ConfigError: If the config file is missing, unparsable or invalid
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    resolved_path = _get_config_path(config_path)
    if resolved_path is None:
        logger.debug("No config file found, using defaults")
        return config

    try:
        with open(resolved_path, 'r') as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {resolved_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {resolved_path}: {e}")

    if not loaded:
        raise ConfigError(f"Config file at {resolved_path} is empty")
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file at {resolved_path} must contain a mapping")

    for name in DEFAULT_CONFIG:
        config[name].update(_section(loaded, name, resolved_path))

    _validate_authentication(config["authentication"], resolved_path)

    if not isinstance(config["replication"]["copy_all_versions"], bool):
        raise ConfigError("'replication.copy_all_versions' must be true or false")

    level = str(config["logging"]["level"]).upper()
    if level not in SUPPORTED_LOG_LEVELS:
        raise ConfigError(
            f"Unsupported logging level: {config['logging']['level']}\n"
            f"Supported levels: {', '.join(SUPPORTED_LOG_LEVELS)}"
        )
    config["logging"]["level"] = level

    logger.debug(f"Configuration loaded successfully from {resolved_path}")
    return config


def apply_credentials(config: Dict[str, Any]) -> None:
    """Point Google client libraries at the configured service account, if any."""
    auth = config.get("authentication", {})
    if auth.get("type") == "service_account":
        os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = auth["service_account_path"]
        logger.debug(f"Set GOOGLE_APPLICATION_CREDENTIALS from config: {auth['service_account_path']}")


def copy_all_versions_enabled(config: Dict[str, Any]) -> bool:
    """
    Whether every enabled version should be copied.

    The COPY_ALL_VERSIONS environment variable ("true"/"false") overrides the
    config file.

    Raises:
        ConfigError: If the environment variable holds anything else
    """
    env_value = os.getenv(COPY_ALL_VERSIONS_ENV_VAR)
    if env_value is None or env_value == "":
        return config["replication"]["copy_all_versions"]

    normalized = env_value.strip().lower()
    if normalized not in ("true", "false"):
        raise ConfigError(f"{COPY_ALL_VERSIONS_ENV_VAR} must be 'true' or 'false', got: {env_value}")
    return normalized == "true"
