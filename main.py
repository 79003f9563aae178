"""Main entry point for the Telegram SMS settings panel."""

import asyncio
import logging
import os
import signal
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

from sms_panel.config import Config, ConfigError, ConfigStore
from sms_panel.panel import SettingsPanel
from sms_panel.version import __version__
from sms_panel.web import WebServer


# Global flag for graceful shutdown
shutdown_event = asyncio.Event()


def setup_logging(config: Config):
    """Set up console and rotating file logging."""
    log_config = config.logging_config
    log_level = getattr(logging, log_config.get('level', 'INFO'))

    log_dir = Path('logs')
    log_dir.mkdir(exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    max_bytes = int(float(log_config.get('max_file_size_mb', 10)) * 1024 * 1024)
    backup_count = int(float(log_config.get('backup_count', 5)))

    file_handler = RotatingFileHandler(
        log_dir / 'sms_panel.log',
        maxBytes=max_bytes,
        backupCount=backup_count
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logging.info("Logging initialized")


def start_server_thread(config: Config) -> threading.Thread:
    """
    Start the reference backend in a background thread.

    Args:
        config: Loaded panel settings

    Returns:
        The started thread
    """
    server_config = config.server
    store = ConfigStore(server_config['store_file'])
    web_server = WebServer(store)

    server_thread = threading.Thread(
        target=web_server.run,
        kwargs={'host': server_config['bind_host'], 'port': int(server_config['port'])},
        daemon=True,
        name="WebServerThread"
    )
    server_thread.start()
    return server_thread


def log_panel_state(panel: SettingsPanel):
    """Log what the panel currently shows."""
    logger = logging.getLogger(__name__)
    view = panel.view
    logger.info(f"Service:        {view.service_status.text}")
    logger.info(f"Android:        {view.android_version.text}")
    logger.info(f"App version:    {view.app_version.text}")
    logger.info(f"Battery:        {view.battery_level.text}")
    logger.info(f"Chat ID:        {view.chat_id.value or '(empty)'}")
    logger.info(f"Fallback SMS:   {view.fallback_sms.checked}")


async def main():
    """Main entry point for the application."""
    config_path = os.environ.get('SMS_PANEL_CONFIG_PATH', 'config.yaml')

    try:
        config = Config(config_path)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config)

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info(f"Telegram SMS Settings Panel v{__version__}")
    logger.info("=" * 60)

    for path, env_var in config.env_overridden_paths.items():
        logger.info(f"Setting {path} overridden by {env_var}")

    if config.server.get('enabled', False):
        logger.info(f"Starting reference backend on {config.server['bind_host']}:{config.server['port']}")
        start_server_thread(config)

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, shutdown_event.set)

    panel = SettingsPanel.from_config(config)
    logger.info(f"Connecting to panel API at {panel.client.base_url}")

    try:
        await panel.start()
        log_panel_state(panel)
        await shutdown_event.wait()
        logger.info("Shutdown requested")
    finally:
        await panel.stop()
        logger.info("Shutdown complete")


if __name__ == '__main__':
    asyncio.run(main())
