"""Flask reference backend serving the panel API."""

import asyncio
import logging
import platform
from typing import Dict, Any, Optional, Callable

from flask import Flask, request, jsonify

from ..config.config_store import ConfigStore, ConfigStoreError
from ..config.settings_model import Configuration, StatusInfo
from ..version import __version__
from .connection_tester import TelegramConnectionTester

logger = logging.getLogger(__name__)


SAVE_SUCCESS_MESSAGE = 'Configuration saved successfully! Services restarting...'


def default_info_provider() -> Dict[str, Any]:
    """Platform description; no battery information is available by default."""
    return {
        'androidVersion': f"{platform.system()} {platform.release()} (Python {platform.python_version()})",
    }


class WebServer:
    """
    Flask-based backend providing the JSON API the settings panel talks to:
    - GET/POST /api/config for the configuration record
    - GET /api/info for the status snapshot
    - GET /api/test for the upstream connection check
    """

    def __init__(self, config_store: ConfigStore,
                 info_provider: Optional[Callable[[], Dict[str, Any]]] = None,
                 connection_tester: Optional[TelegramConnectionTester] = None,
                 on_config_saved: Optional[Callable[[Configuration], None]] = None):
        """
        Initialize web server.

        Args:
            config_store: Store holding the configuration record
            info_provider: Callable returning ``androidVersion`` and optionally
                ``batteryLevel`` for the status snapshot
            connection_tester: Tester used by the test endpoint
            on_config_saved: Hook invoked with the new configuration after each save,
                e.g. to restart dependent services
        """
        self.config_store = config_store
        self.info_provider = info_provider or default_info_provider
        self.connection_tester = connection_tester or TelegramConnectionTester()
        self.on_config_saved = on_config_saved

        self.app = Flask(__name__)

        # Keep werkzeug request logging out of our logs
        logging.getLogger('werkzeug').setLevel(logging.WARNING)

        self._register_routes()

        logger.info("WebServer initialized")

    def _register_routes(self):
        """Register Flask routes."""

        @self.app.route('/api/config', methods=['GET'])
        def api_config_get():
            """
            Get current configuration.

            Returns:
                JSON: Configuration record with all fields
            """
            try:
                config = self.config_store.get_configuration()
                return jsonify(config.to_dict())
            except Exception as e:
                logger.error(f"Failed to get config: {e}", exc_info=True)
                return jsonify({'message': f'Failed to get configuration: {e}'}), 500

        @self.app.route('/api/config', methods=['POST'])
        def api_config_post():
            """
            Replace the configuration.

            Expects:
                JSON: Complete configuration record; missing fields are stored
                as empty string / false

            Returns:
                JSON: Confirmation message
            """
            new_config = request.get_json(silent=True)

            if not isinstance(new_config, dict):
                return jsonify({'message': 'Configuration must be a JSON object'}), 400

            config = Configuration.from_dict(new_config)

            try:
                self.config_store.save_configuration(config)
            except ConfigStoreError as e:
                logger.error(f"Error saving configuration: {e}")
                return jsonify({'message': f'Failed to save configuration: {e}'}), 500

            logger.info(
                f"Configuration saved (batteryMonitoring={config.battery_monitoring}, "
                f"chatCommand={config.chat_command})"
            )

            if self.on_config_saved:
                try:
                    self.on_config_saved(config)
                except Exception as e:
                    logger.error(f"Error restarting services: {e}", exc_info=True)

            return jsonify({'message': SAVE_SUCCESS_MESSAGE})

        @self.app.route('/api/info', methods=['GET'])
        def api_info():
            """
            Get the status snapshot.

            Returns:
                JSON: serviceRunning, androidVersion, appVersion and, when known, batteryLevel
            """
            try:
                return jsonify(self._get_status_info().to_dict())
            except Exception as e:
                logger.error(f"Failed to get system info: {e}", exc_info=True)
                return jsonify({'message': f'Failed to get system info: {e}'}), 500

        @self.app.route('/api/test', methods=['GET'])
        def api_test():
            """
            Test the connection to Telegram with the stored bot token.

            Returns:
                JSON: Result message
            """
            bot_token = self.config_store.get_bot_token()
            if not bot_token:
                return jsonify({'message': 'Bot token is not configured'}), 400

            connected, message = asyncio.run(self.connection_tester.test_connectivity(bot_token))
            if not connected:
                return jsonify({'message': message}), 502

            return jsonify({'message': message})

        @self.app.route('/api/<path:endpoint>', methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
        def api_not_found(endpoint):
            """Fallback for unknown API endpoints."""
            return jsonify({'message': 'API endpoint not found'}), 404

    def _get_status_info(self) -> StatusInfo:
        """
        Build the current status snapshot.

        Returns:
            StatusInfo for the service
        """
        details = self.info_provider() or {}
        return StatusInfo(
            service_running=self.config_store.is_initialized(),
            android_version=details.get('androidVersion'),
            app_version=__version__,
            battery_level=details.get('batteryLevel'),
        )

    def run(self, host: str = '127.0.0.1', port: int = 8080, debug: bool = False):
        """
        Run the web server.

        Args:
            host: Host to bind to
            port: Port to bind to
            debug: Enable debug mode
        """
        if host not in ['127.0.0.1', 'localhost']:
            logger.warning("=" * 80)
            logger.warning("SECURITY WARNING: Panel API is accessible over the network")
            logger.warning(f"Binding to: {host}:{port}")
            logger.warning("The API has no authentication; do not expose it to the internet")
            logger.warning("=" * 80)

        logger.info(f"Starting web server on {host}:{port}")

        self.app.run(host=host, port=port, debug=debug, use_reloader=False)
