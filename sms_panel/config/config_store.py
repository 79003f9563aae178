"""Thread-safe YAML store backing the reference panel backend."""

import copy
import yaml
import logging
import threading
from pathlib import Path
from typing import Dict, Any

from .settings_model import Configuration, to_bool


logger = logging.getLogger(__name__)


class ConfigStoreError(Exception):
    """Configuration store error."""
    pass


# Configuration attribute -> stored preference key
STORE_KEYS = {
    'bot_token': 'bot_token',
    'chat_id': 'chat_id',
    'trusted_number': 'trusted_phone_number',
    'chat_command': 'chat_command',
    'battery_monitoring': 'battery_monitoring_switch',
    'charger_status': 'charger_status',
    'fallback_sms': 'fallback_sms',
    'verification_code': 'verification_code',
    'privacy_mode': 'privacy_mode',
    'doh_switch': 'doh_switch',
}


class ConfigStore:
    """
    Persists the panel configuration record as YAML.

    Values are kept under the service's preference key names plus an
    ``initialized`` flag that is set by the first successful save and is
    reported as ``serviceRunning``.
    """

    DEFAULT_VALUES = {
        'bot_token': '',
        'chat_id': '',
        'trusted_phone_number': '',
        'chat_command': False,
        'battery_monitoring_switch': False,
        'charger_status': False,
        'fallback_sms': False,
        'verification_code': True,
        'privacy_mode': False,
        'doh_switch': False,
        'initialized': False,
    }

    def __init__(self, store_path: str):
        """
        Initialize the store.

        Args:
            store_path: Path to the YAML file holding the stored values
        """
        self._lock = threading.RLock()
        self.store_path = Path(store_path)
        self._values = self._load()
        logger.info(f"Config store initialized: {self.store_path}")

    def _load(self) -> Dict[str, Any]:
        """Load stored values, falling back to defaults if missing or unreadable."""
        values = copy.deepcopy(self.DEFAULT_VALUES)

        if not self.store_path.exists():
            logger.info(f"No stored configuration at {self.store_path}, using defaults")
            return values

        try:
            with open(self.store_path, 'r') as f:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            logger.error(f"Failed to read stored configuration: {e}")
            logger.warning("Falling back to default configuration")
            return values

        if not isinstance(data, dict):
            logger.error(f"Invalid stored configuration format: {self.store_path}")
            return values

        for key, default in self.DEFAULT_VALUES.items():
            if key in data and data[key] is not None:
                if isinstance(default, bool):
                    values[key] = to_bool(data[key])
                else:
                    values[key] = str(data[key])

        logger.info(f"Loaded stored configuration from: {self.store_path}")
        return values

    def _write_to_disk(self, values: Dict[str, Any]) -> None:
        """
        Write values to disk atomically.

        Args:
            values: Values to write
        """
        temp_path = self.store_path.with_suffix('.tmp')

        try:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, 'w') as f:
                yaml.dump(values, f, default_flow_style=False, sort_keys=False)
            temp_path.replace(self.store_path)
            logger.info(f"Configuration written to: {self.store_path}")
        except OSError as e:
            logger.error(f"Failed to write configuration: {e}")
            if temp_path.exists():
                temp_path.unlink()
            raise ConfigStoreError(str(e))

    def get_configuration(self) -> Configuration:
        """Return the stored configuration record."""
        with self._lock:
            return Configuration(**{
                attr: self._values[key] for attr, key in STORE_KEYS.items()
            })

    def save_configuration(self, config: Configuration) -> None:
        """
        Replace the stored configuration and mark the store initialized.

        Args:
            config: Complete configuration record

        Raises:
            ConfigStoreError: If the values cannot be written
        """
        with self._lock:
            values = copy.deepcopy(self._values)
            for attr, key in STORE_KEYS.items():
                values[key] = getattr(config, attr)
            values['initialized'] = True

            self._write_to_disk(values)
            self._values = values
            logger.info("Stored configuration updated")

    def is_initialized(self) -> bool:
        """Whether a configuration has been saved at least once."""
        with self._lock:
            return bool(self._values['initialized'])

    def get_bot_token(self) -> str:
        """Return the stored bot token."""
        with self._lock:
            return self._values['bot_token']

