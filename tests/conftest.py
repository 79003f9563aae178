"""Pytest fixtures and configuration for testing the settings panel."""

import pytest

from sms_panel.config.settings_model import Configuration, StatusInfo


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def configuration_dict():
    """A complete configuration in its JSON wire form."""
    return {
        'botToken': '123456:ABC-DEF',
        'chatId': '987654321',
        'trustedNumber': '+15551234567',
        'chatCommand': True,
        'batteryMonitoring': True,
        'chargerStatus': True,
        'fallbackSms': True,
        'verificationCode': False,
        'privacyMode': False,
        'dohSwitch': True,
    }


@pytest.fixture
def partial_configuration_dict():
    """A configuration response carrying only the required strings."""
    return {
        'botToken': 't',
        'chatId': 'c',
    }


@pytest.fixture
def configuration(configuration_dict):
    """A complete Configuration object."""
    return Configuration.from_dict(configuration_dict)


@pytest.fixture
def minimal_configuration():
    """Smallest configuration that passes validation."""
    return Configuration(bot_token='t', chat_id='c', fallback_sms=False, trusted_number='')


# ============================================================================
# Status Fixtures
# ============================================================================

@pytest.fixture
def status_dict():
    """A status snapshot in its JSON wire form."""
    return {
        'serviceRunning': True,
        'androidVersion': 'Android 13 (API 33)',
        'appVersion': '2.4.1',
        'batteryLevel': 87,
    }


@pytest.fixture
def status_info(status_dict):
    """A StatusInfo object."""
    return StatusInfo.from_dict(status_dict)
