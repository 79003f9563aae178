"""Settings loader for the panel client and its reference backend."""

import os
import copy
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional

from .settings_model import to_bool


logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error exception."""
    pass


# Environment variable to config key mapping
# All environment variables must use the SMS_PANEL_ prefix
ENV_VAR_MAPPING = {
    # Backend API
    'SMS_PANEL_API_BASE_URL': ('api', 'base_url', str),
    'SMS_PANEL_API_TIMEOUT_SECONDS': ('api', 'timeout_seconds', float),

    # Panel timing
    'SMS_PANEL_STATUS_REFRESH_SECONDS': ('panel', 'status_refresh_seconds', float),
    'SMS_PANEL_NOTIFICATION_SECONDS': ('panel', 'notification_seconds', float),
    'SMS_PANEL_SAVE_REFRESH_DELAY_SECONDS': ('panel', 'save_refresh_delay_seconds', float),

    # Reference backend
    'SMS_PANEL_SERVER_ENABLED': ('server', 'enabled', to_bool),
    'SMS_PANEL_SERVER_HOST': ('server', 'bind_host', str),
    'SMS_PANEL_SERVER_PORT': ('server', 'port', int),
    'SMS_PANEL_STORE_FILE': ('server', 'store_file', str),

    # Logging
    'SMS_PANEL_LOG_LEVEL': ('logging', 'level', str),
}


DEFAULT_SETTINGS = {
    'api': {
        'base_url': 'http://127.0.0.1:8080/api',
        'timeout_seconds': 10,
    },
    'panel': {
        'status_refresh_seconds': 30,
        'notification_seconds': 5,
        'save_refresh_delay_seconds': 1,
    },
    'server': {
        'enabled': False,
        'bind_host': '127.0.0.1',
        'port': 8080,
        'store_file': 'state/panel_config.yaml',
    },
    'logging': {
        'level': 'INFO',
        'max_file_size_mb': 10,
        'backup_count': 5,
    },
}


def get_env_var(env_var: str, convert_type) -> Optional[Any]:
    """
    Get environment variable and convert to specified type.

    Args:
        env_var: Environment variable name
        convert_type: Type conversion function (int, float, str, or callable)

    Returns:
        Converted value or None if not set
    """
    value = os.environ.get(env_var)
    if value is None:
        return None

    try:
        return convert_type(value)
    except (ValueError, TypeError) as e:
        logger.warning(f"Failed to convert environment variable {env_var}={value}: {e}")
        return None


def apply_env_overrides(config: Dict[str, Any]) -> tuple[Dict[str, Any], Dict[str, str]]:
    """
    Apply environment variable overrides and track which fields were overridden.

    Args:
        config: Settings dictionary

    Returns:
        Tuple of (settings with overrides applied, dict mapping setting paths to env var names)
    """
    env_overridden_paths = {}

    for env_var, mapping_tuple in ENV_VAR_MAPPING.items():
        value = get_env_var(env_var, mapping_tuple[-1])
        if value is None:
            continue

        sections = mapping_tuple[:-1]
        current = config
        for section in sections[:-1]:
            current = current.setdefault(section, {})
        current[sections[-1]] = value

        path = '.'.join(sections)
        env_overridden_paths[path] = env_var
        logger.info(f"Environment variable override: {env_var} -> {path} = {value}")

    return config, env_overridden_paths


def _merge_defaults(defaults: Dict[str, Any], loaded: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay loaded values on a copy of the defaults, section by section."""
    merged = copy.deepcopy(defaults)
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Settings for the panel client, its timers and the optional backend."""

    def __init__(self, config_path: str = None):
        """
        Initialize settings from YAML file with environment variable overrides.

        Args:
            config_path: Path to the settings file (defaults to SMS_PANEL_CONFIG_PATH env var or "config.yaml")
        """
        if config_path is None:
            config_path = os.environ.get('SMS_PANEL_CONFIG_PATH', 'config.yaml')

        logger.info(f"Loading panel settings from: {config_path}")
        self.config_path = Path(config_path)
        self._config = _merge_defaults(DEFAULT_SETTINGS, self._load_config())
        self._config, self._env_overridden_paths = apply_env_overrides(self._config)

        self._validate_config()
        logger.info("Panel settings loaded and validated successfully")

    def _load_config(self) -> Dict[str, Any]:
        """Load settings from the YAML file, or nothing if the file is absent."""
        if not self.config_path.exists():
            logger.warning(f"Settings file not found: {self.config_path}, using defaults")
            return {}

        try:
            with open(self.config_path, 'r') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML settings file: {e}")
            raise ConfigError(f"Error parsing settings file: {e}")
        except OSError as e:
            logger.error(f"Unable to read settings file: {type(e).__name__}: {e}")
            raise ConfigError(f"Error loading settings file: {e}")

        if config is None:
            logger.warning("Settings file is empty, using defaults")
            return {}

        if not isinstance(config, dict):
            logger.error(f"Settings must be a dictionary, got: {type(config)}")
            raise ConfigError(f"Invalid settings format: expected dictionary, got {type(config)}")

        logger.debug(f"Settings sections: {list(config.keys())}")
        return config

    def _validate_config(self):
        """Validate section types and numeric values."""
        for section in DEFAULT_SETTINGS:
            if not isinstance(self._config.get(section), dict):
                raise ConfigError(f"Settings section '{section}' must be a dictionary")

        base_url = self._config['api'].get('base_url')
        if not base_url or not isinstance(base_url, str):
            raise ConfigError("api.base_url must be a non-empty string")
        if not base_url.startswith(('http://', 'https://')):
            raise ConfigError(f"api.base_url must be an http(s) URL, got: {base_url}")

        positive_fields = [
            ('api', 'timeout_seconds'),
            ('panel', 'status_refresh_seconds'),
            ('panel', 'notification_seconds'),
            ('panel', 'save_refresh_delay_seconds'),
            ('server', 'port'),
            ('logging', 'max_file_size_mb'),
            ('logging', 'backup_count'),
        ]
        for section, field in positive_fields:
            raw = self._config[section].get(field)
            try:
                value = float(raw)
            except (ValueError, TypeError) as e:
                logger.error(f"Invalid value for {section}.{field}: {raw}")
                raise ConfigError(f"{section}.{field} must be a valid number: {e}")
            if value <= 0:
                logger.error(f"Invalid {section}.{field}: {value} (must be positive)")
                raise ConfigError(f"{section}.{field} must be positive, got: {value}")

        level = str(self._config['logging'].get('level', 'INFO')).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigError(f"Unknown logging level: {level}")
        self._config['logging']['level'] = level

    @property
    def api(self) -> Dict[str, Any]:
        """Get backend API settings."""
        return self._config['api']

    @property
    def panel(self) -> Dict[str, Any]:
        """Get panel timing settings."""
        return self._config['panel']

    @property
    def server(self) -> Dict[str, Any]:
        """Get reference backend settings."""
        return self._config['server']

    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self._config['logging']

    @property
    def env_overridden_paths(self) -> Dict[str, str]:
        """Mapping of setting paths (e.g. 'api.base_url') to the env vars that override them."""
        return self._env_overridden_paths
