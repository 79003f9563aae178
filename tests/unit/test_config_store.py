#!/usr/bin/env python3
"""
Unit tests for the YAML-backed configuration store.
"""

import shutil
import unittest
import tempfile
import yaml
from pathlib import Path

from sms_panel.config.config_store import ConfigStore
from sms_panel.config.settings_model import Configuration


class TestConfigStore(unittest.TestCase):
    """Test ConfigStore persistence."""

    def setUp(self):
        """Set up test environment."""
        self.test_dir = tempfile.mkdtemp()
        self.store_path = Path(self.test_dir) / "state" / "panel_config.yaml"

    def tearDown(self):
        """Clean up test environment."""
        if Path(self.test_dir).exists():
            shutil.rmtree(self.test_dir)

    def test_defaults_when_missing(self):
        """Test that a fresh store reports defaults and is not initialized."""
        store = ConfigStore(str(self.store_path))
        config = store.get_configuration()

        self.assertEqual(config.bot_token, '')
        self.assertEqual(config.chat_id, '')
        self.assertFalse(config.battery_monitoring)
        # Verification code defaults on
        self.assertTrue(config.verification_code)
        self.assertFalse(store.is_initialized())
        self.assertFalse(self.store_path.exists())

    def test_save_writes_and_marks_initialized(self):
        """Test that saving persists values under the preference key names."""
        store = ConfigStore(str(self.store_path))
        store.save_configuration(Configuration(
            bot_token='tok', chat_id='42', trusted_number='+1555',
            battery_monitoring=True, fallback_sms=True,
        ))

        self.assertTrue(store.is_initialized())
        self.assertTrue(self.store_path.exists())
        self.assertFalse(self.store_path.with_suffix('.tmp').exists())

        with open(self.store_path) as f:
            data = yaml.safe_load(f)

        self.assertEqual(data['bot_token'], 'tok')
        self.assertEqual(data['trusted_phone_number'], '+1555')
        self.assertTrue(data['battery_monitoring_switch'])
        self.assertFalse(data['verification_code'])
        self.assertTrue(data['initialized'])

    def test_values_survive_reload(self):
        """Test that a new store instance reads what the previous one saved."""
        saved = Configuration(bot_token='tok', chat_id='42', doh_switch=True)
        ConfigStore(str(self.store_path)).save_configuration(saved)

        reloaded = ConfigStore(str(self.store_path))

        self.assertEqual(reloaded.get_configuration(), saved)
        self.assertTrue(reloaded.is_initialized())
        self.assertEqual(reloaded.get_bot_token(), 'tok')

    def test_corrupt_file_falls_back_to_defaults(self):
        """Test that an unreadable file does not prevent startup."""
        self.store_path.parent.mkdir(parents=True)
        self.store_path.write_text('bot_token: [unclosed\n')

        store = ConfigStore(str(self.store_path))

        self.assertEqual(store.get_configuration().bot_token, '')
        self.assertFalse(store.is_initialized())

    def test_partial_file_fills_defaults(self):
        """Test that keys missing from the file take their defaults."""
        self.store_path.parent.mkdir(parents=True)
        with open(self.store_path, 'w') as f:
            yaml.dump({'chat_id': 12345, 'privacy_mode': True}, f)

        config = ConfigStore(str(self.store_path)).get_configuration()

        self.assertEqual(config.chat_id, '12345')
        self.assertTrue(config.privacy_mode)
        self.assertTrue(config.verification_code)

    def test_string_flags_in_file_are_parsed(self):
        """Test that hand-edited 'false' strings load as False."""
        self.store_path.parent.mkdir(parents=True)
        with open(self.store_path, 'w') as f:
            yaml.dump({
                'fallback_sms': 'false',
                'verification_code': 'no',
                'privacy_mode': 'true',
                'initialized': 'false',
            }, f)

        store = ConfigStore(str(self.store_path))
        config = store.get_configuration()

        self.assertFalse(config.fallback_sms)
        self.assertFalse(config.verification_code)
        self.assertTrue(config.privacy_mode)
        self.assertFalse(store.is_initialized())


if __name__ == '__main__':
    unittest.main()
