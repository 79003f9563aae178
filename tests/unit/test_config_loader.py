#!/usr/bin/env python3
"""
Unit tests for the panel settings loader.
"""

import os
import shutil
import unittest
import tempfile
import yaml
from pathlib import Path

from sms_panel.config.config_loader import Config, ConfigError


class TestConfigLoader(unittest.TestCase):
    """Test Config loading, defaults and environment overrides."""

    def setUp(self):
        """Set up test environment."""
        self.test_dir = tempfile.mkdtemp()
        self.config_path = Path(self.test_dir) / "config.yaml"

        # Store original environment
        self.original_env = os.environ.copy()

        # Clear panel env vars
        for key in list(os.environ.keys()):
            if key.startswith('SMS_PANEL_'):
                del os.environ[key]

    def tearDown(self):
        """Clean up test environment."""
        os.environ.clear()
        os.environ.update(self.original_env)

        if Path(self.test_dir).exists():
            shutil.rmtree(self.test_dir)

    def _write_config(self, data):
        with open(self.config_path, 'w') as f:
            yaml.dump(data, f)

    def test_defaults_when_file_missing(self):
        """Test that a missing file yields the default settings."""
        config = Config(str(self.config_path))

        self.assertEqual(config.api['base_url'], 'http://127.0.0.1:8080/api')
        self.assertEqual(config.panel['status_refresh_seconds'], 30)
        self.assertEqual(config.panel['notification_seconds'], 5)
        self.assertEqual(config.panel['save_refresh_delay_seconds'], 1)
        self.assertFalse(config.server['enabled'])
        self.assertEqual(config.logging_config['level'], 'INFO')
        self.assertEqual(config.env_overridden_paths, {})

    def test_empty_file_uses_defaults(self):
        """Test that an empty file is treated like a missing one."""
        self.config_path.write_text('')
        config = Config(str(self.config_path))
        self.assertEqual(config.api['timeout_seconds'], 10)

    def test_file_values_merge_with_defaults(self):
        """Test that file values override defaults within a section."""
        self._write_config({
            'api': {'base_url': 'http://phone.local:8080/api'},
            'panel': {'status_refresh_seconds': 60},
        })

        config = Config(str(self.config_path))

        self.assertEqual(config.api['base_url'], 'http://phone.local:8080/api')
        self.assertEqual(config.api['timeout_seconds'], 10)
        self.assertEqual(config.panel['status_refresh_seconds'], 60)
        self.assertEqual(config.panel['notification_seconds'], 5)

    def test_env_overrides(self):
        """Test that SMS_PANEL_* variables override file values."""
        self._write_config({'api': {'base_url': 'http://phone.local:8080/api'}})
        os.environ['SMS_PANEL_API_BASE_URL'] = 'http://10.0.0.5:8080/api'
        os.environ['SMS_PANEL_NOTIFICATION_SECONDS'] = '2.5'
        os.environ['SMS_PANEL_SERVER_ENABLED'] = 'yes'
        os.environ['SMS_PANEL_SERVER_PORT'] = '9090'

        config = Config(str(self.config_path))

        self.assertEqual(config.api['base_url'], 'http://10.0.0.5:8080/api')
        self.assertEqual(config.panel['notification_seconds'], 2.5)
        self.assertTrue(config.server['enabled'])
        self.assertEqual(config.server['port'], 9090)
        self.assertEqual(config.env_overridden_paths['api.base_url'], 'SMS_PANEL_API_BASE_URL')

    def test_unconvertible_env_value_is_ignored(self):
        """Test that a bad env value is skipped rather than applied."""
        os.environ['SMS_PANEL_SERVER_PORT'] = 'not-a-port'
        config = Config(str(self.config_path))
        self.assertEqual(config.server['port'], 8080)
        self.assertNotIn('server.port', config.env_overridden_paths)

    def test_config_path_from_env(self):
        """Test that SMS_PANEL_CONFIG_PATH selects the settings file."""
        self._write_config({'logging': {'level': 'debug'}})
        os.environ['SMS_PANEL_CONFIG_PATH'] = str(self.config_path)

        config = Config()

        self.assertEqual(config.logging_config['level'], 'DEBUG')

    def test_invalid_yaml_raises(self):
        """Test that unparseable YAML raises ConfigError."""
        self.config_path.write_text('api: [unclosed\n')
        with self.assertRaises(ConfigError):
            Config(str(self.config_path))

    def test_non_dict_root_raises(self):
        """Test that a list at the root raises ConfigError."""
        self._write_config(['a', 'b'])
        with self.assertRaises(ConfigError):
            Config(str(self.config_path))

    def test_non_positive_interval_raises(self):
        """Test that zero or negative timings are rejected."""
        self._write_config({'panel': {'status_refresh_seconds': 0}})
        with self.assertRaises(ConfigError) as ctx:
            Config(str(self.config_path))
        self.assertIn('status_refresh_seconds', str(ctx.exception))

    def test_non_numeric_timeout_raises(self):
        """Test that non-numeric timings are rejected."""
        self._write_config({'api': {'timeout_seconds': 'soon'}})
        with self.assertRaises(ConfigError):
            Config(str(self.config_path))

    def test_base_url_must_be_http(self):
        """Test that the API base URL must be http(s)."""
        self._write_config({'api': {'base_url': 'ftp://phone.local/api'}})
        with self.assertRaises(ConfigError):
            Config(str(self.config_path))

    def test_log_rotation_settings_must_be_numeric(self):
        """Test that log file size and backup count are validated."""
        self._write_config({'logging': {'max_file_size_mb': 'big'}})
        with self.assertRaises(ConfigError) as ctx:
            Config(str(self.config_path))
        self.assertIn('max_file_size_mb', str(ctx.exception))

        self._write_config({'logging': {'backup_count': 0}})
        with self.assertRaises(ConfigError) as ctx:
            Config(str(self.config_path))
        self.assertIn('backup_count', str(ctx.exception))

    def test_unknown_log_level_raises(self):
        """Test that an unknown logging level is rejected."""
        self._write_config({'logging': {'level': 'LOUD'}})
        with self.assertRaises(ConfigError):
            Config(str(self.config_path))


if __name__ == '__main__':
    unittest.main()
