"""Configuration and status records exchanged with the panel backend."""

import logging
from dataclasses import dataclass, fields
from typing import Dict, Any, Optional


logger = logging.getLogger(__name__)


class PanelError(Exception):
    """Base class for errors surfaced through the panel."""
    pass


class ValidationError(PanelError):
    """Configuration failed local validation before submission."""
    pass


def to_bool(value: Any) -> bool:
    """
    Coerce a loosely typed flag to a bool.

    Strings are parsed ('false' is False), everything else uses truthiness.
    """
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    return bool(value)


# Python attribute -> JSON wire key
STRING_FIELDS = {
    'bot_token': 'botToken',
    'chat_id': 'chatId',
    'trusted_number': 'trustedNumber',
}

BOOLEAN_FIELDS = {
    'chat_command': 'chatCommand',
    'battery_monitoring': 'batteryMonitoring',
    'charger_status': 'chargerStatus',
    'fallback_sms': 'fallbackSms',
    'verification_code': 'verificationCode',
    'privacy_mode': 'privacyMode',
    'doh_switch': 'dohSwitch',
}

WIRE_KEYS = {**STRING_FIELDS, **BOOLEAN_FIELDS}


@dataclass
class Configuration:
    """The settings record edited by the panel."""
    bot_token: str = ''
    chat_id: str = ''
    trusted_number: str = ''
    chat_command: bool = False
    battery_monitoring: bool = False
    charger_status: bool = False
    fallback_sms: bool = False
    verification_code: bool = False
    privacy_mode: bool = False
    doh_switch: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Configuration':
        """
        Build a configuration from its JSON wire form.

        Absent or null string fields become an empty string and absent or
        null booleans become False.

        Args:
            data: Decoded JSON object (camelCase keys)

        Returns:
            Configuration instance
        """
        data = data or {}
        values = {}

        for attr, key in STRING_FIELDS.items():
            value = data.get(key)
            values[attr] = '' if value is None else str(value)

        for attr, key in BOOLEAN_FIELDS.items():
            value = data.get(key)
            values[attr] = False if value is None else to_bool(value)

        missing = [key for key in WIRE_KEYS.values() if key not in data]
        if missing:
            logger.debug(f"Configuration response missing fields, using defaults: {missing}")

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON wire form (all fields, camelCase keys)."""
        return {WIRE_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}

    def trimmed(self) -> 'Configuration':
        """Return a copy with surrounding whitespace stripped from string fields."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for attr in STRING_FIELDS:
            values[attr] = values[attr].strip()
        return Configuration(**values)


def validate_configuration(config: Configuration) -> None:
    """
    Validate a configuration before it is submitted.

    Args:
        config: Configuration with string fields already trimmed

    Raises:
        ValidationError: If bot token or chat ID is empty, or fallback SMS
            is enabled without a trusted phone number
    """
    if not config.bot_token or not config.chat_id:
        raise ValidationError('Bot Token and Chat ID are required')

    if config.fallback_sms and not config.trusted_number:
        raise ValidationError('Trusted phone number is required when fallback SMS is enabled')


@dataclass
class StatusInfo:
    """Read-only status snapshot reported by the backend."""
    service_running: bool = False
    android_version: Optional[str] = None
    app_version: Optional[str] = None
    battery_level: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'StatusInfo':
        """Create from the JSON wire form."""
        data = data or {}

        battery_level = data.get('batteryLevel')
        if battery_level is not None:
            try:
                battery_level = int(battery_level)
            except (ValueError, TypeError):
                logger.warning(f"Ignoring non-numeric batteryLevel: {battery_level!r}")
                battery_level = None

        return cls(
            service_running=bool(data.get('serviceRunning', False)),
            android_version=data.get('androidVersion'),
            app_version=data.get('appVersion'),
            battery_level=battery_level,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON wire form, omitting an unknown battery level."""
        data = {
            'serviceRunning': self.service_running,
            'androidVersion': self.android_version,
            'appVersion': self.app_version,
        }
        if self.battery_level is not None:
            data['batteryLevel'] = self.battery_level
        return data
