"""Configuration package."""

from .config_loader import Config, ConfigError
from .config_store import ConfigStore, ConfigStoreError
from .settings_model import (
    Configuration,
    StatusInfo,
    PanelError,
    ValidationError,
    validate_configuration,
)

__all__ = [
    'Config',
    'ConfigError',
    'ConfigStore',
    'ConfigStoreError',
    'Configuration',
    'StatusInfo',
    'PanelError',
    'ValidationError',
    'validate_configuration',
]
