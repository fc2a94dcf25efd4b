"""Configuration loader for goldfinch."""
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional
import yaml

from .preferences import get_preference

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error exception."""
    pass


@dataclass(frozen=True)
class FetchSettings:
    """Tuning for concurrent secret fetches."""
    max_workers: Optional[int] = None
    timeout: Optional[float] = None


def default_config_path() -> Path:
    return Path.home() / ".config" / "goldfinch" / "config.yml"


def _get_config_path() -> str:
    """
    Get config file path using XDG Base Directory standard.

    Priority order:
    1. User preference (stored in ~/.config/goldfinch/preferences.json)
    2. Default location: ~/.config/goldfinch/config.yml

    Returns:
        Absolute path to config file

    Raises:
        FileNotFoundError: If config file doesn't exist in any location
    """
    config_path_pref = get_preference("config_path")
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.debug(f"Using config from preference: {config_path}")
            return str(config_path)
        else:
            logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.debug(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Please set up your config file using one of these methods:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        "   goldfinch config set-path /path/to/your/config.yml\n\n"
        "3. Skip the config file and pass --project-id or set GCP_PROJECT\n"
    )


def _validate_authentication(auth: Any, config_path: str) -> None:
    if not isinstance(auth, dict):
        raise ConfigError(f"'authentication' section in {config_path} must be a mapping")

    if 'type' not in auth:
        raise ConfigError("Missing 'authentication.type' in config")

    if auth['type'] != 'service_account':
        raise ConfigError(
            f"Unsupported authentication type: {auth['type']}\n"
            f"Only 'service_account' is supported."
        )

    if 'service_account_path' not in auth:
        raise ConfigError(
            "Missing 'authentication.service_account_path' in config\n"
            "Please specify the absolute path to your service account JSON file."
        )

    service_account_path = auth['service_account_path']

    if not os.path.exists(service_account_path):
        raise ConfigError(
            f"Service account file not found at: {service_account_path}\n"
            f"Please ensure the file exists or update the path in {config_path}"
        )

    if not os.path.isfile(service_account_path):
        raise ConfigError(
            f"Service account path is not a file: {service_account_path}"
        )


def _validate_fetch(fetch: Any) -> None:
    if not isinstance(fetch, dict):
        raise ConfigError("'fetch' section in config must be a mapping")

    max_workers = fetch.get('max_workers')
    if max_workers is not None:
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise ConfigError(f"'fetch.max_workers' must be a positive integer, got: {max_workers!r}")

    timeout = fetch.get('timeout')
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(f"'fetch.timeout' must be a positive number of seconds, got: {timeout!r}")


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Returns:
        Dict containing configuration with keys:
        - gcp: dict with project_id
        - authentication (optional): dict with type and service_account_path
        - fetch (optional): dict with max_workers and timeout

    Raises:
        FileNotFoundError: If no config file exists
        ConfigError: If the config file is invalid or the service account file doesn't exist
    """
    # Resolved on every call so preference changes apply immediately
    config_path = _get_config_path()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")

    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    if 'authentication' in config:
        _validate_authentication(config['authentication'], config_path)

    if 'gcp' not in config or not isinstance(config['gcp'], dict):
        raise ConfigError(
            f"Missing 'gcp' section in config at {config_path}\n"
            f"Required format:\n"
            f"gcp:\n"
            f"  project_id: your-project-id"
        )

    if 'project_id' not in config['gcp']:
        raise ConfigError("Missing 'gcp.project_id' in config")

    if 'fetch' in config:
        _validate_fetch(config['fetch'])

    logger.info(f"Configuration loaded successfully from {config_path}")
    logger.debug(f"Using project ID: {config['gcp']['project_id']}")

    return config


def load_optional_config() -> Dict[str, Any]:
    """Load the config file, or return an empty dict when none exists."""
    try:
        return load_config()
    except FileNotFoundError:
        logger.debug("No config file found, relying on flags and environment")
        return {}


def resolve_project_id(config: Dict[str, Any], explicit: Optional[str] = None) -> str:
    """
    Pick the GCP project ID.

    Priority order:
    1. Explicit value (--project-id)
    2. GCP_PROJECT environment variable
    3. Config file gcp.project_id

    Raises:
        ConfigError: If no source provides a project ID
    """
    if explicit:
        return explicit

    gcp_project_env = os.getenv("GCP_PROJECT")
    if gcp_project_env:
        logger.debug(f"Using GCP_PROJECT from environment: {gcp_project_env}")
        return gcp_project_env

    project_id = config.get('gcp', {}).get('project_id')
    if project_id:
        logger.debug(f"Using project_id from config: {project_id}")
        return str(project_id)

    raise ConfigError(
        "Project ID not found. Pass --project-id, set the GCP_PROJECT environment variable, "
        "or configure gcp.project_id in the config file"
    )


def fetch_settings(config: Dict[str, Any]) -> FetchSettings:
    fetch = config.get('fetch') or {}
    return FetchSettings(
        max_workers=fetch.get('max_workers'),
        timeout=fetch.get('timeout'),
    )


def apply_credentials(config: Dict[str, Any]) -> None:
    """Export the configured service account for the Google client libraries."""
    auth = config.get('authentication') or {}
    service_account_path = auth.get('service_account_path')
    if service_account_path:
        os.environ['GOOGLE_APPLICATION_CREDENTIALS'] = service_account_path
        logger.info(f"Set GOOGLE_APPLICATION_CREDENTIALS from config: {service_account_path}")
