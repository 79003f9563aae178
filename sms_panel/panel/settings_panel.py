"""Settings panel controller: load, validate, save and status polling."""

import asyncio
import logging
from typing import Optional, Set

from ..api.api_client import ApiClient, RequestError
from ..config.config_loader import Config
from ..config.settings_model import (
    Configuration,
    StatusInfo,
    PanelError,
    STRING_FIELDS,
    BOOLEAN_FIELDS,
    validate_configuration,
)
from .notifier import Notifier
from .view_model import PanelView, NotificationKind, StatusColor


logger = logging.getLogger(__name__)


ABSENT_PLACEHOLDER = '-'
STATUS_RUNNING = '✅ Running'
STATUS_STOPPED = '❌ Stopped'
STATUS_ERROR = '❌ Error loading info'
TRUSTED_NUMBER_WARNING = '⚠️ Please enter a trusted phone number for fallback SMS'


class SettingsPanel:
    """
    Drives a PanelView against the backend API.

    Every action runs to completion and renders its own result: there is no
    cancellation of issued requests and no retry. The periodic and manual
    status refreshes are independent, so the last response to arrive wins.
    """

    def __init__(self, client: ApiClient, view: Optional[PanelView] = None,
                 notification_seconds: float = 5,
                 status_refresh_seconds: float = 30,
                 save_refresh_delay_seconds: float = 1):
        """
        Initialize the panel.

        Args:
            client: API client for the backend
            view: View model to drive (a fresh one is created when omitted)
            notification_seconds: How long notifications stay visible
            status_refresh_seconds: Interval of the periodic status refresh
            save_refresh_delay_seconds: Delay before refreshing status after a save
        """
        self.client = client
        self.view = view or PanelView()
        self.notifier = Notifier(self.view.notification, notification_seconds)
        self.status_refresh_seconds = status_refresh_seconds
        self.save_refresh_delay_seconds = save_refresh_delay_seconds

        self._refresh_task: Optional[asyncio.Task] = None
        self._pending_refreshes: Set[asyncio.Task] = set()

        self.view.battery_monitoring.on_change(self._on_battery_monitoring_changed)
        self.view.fallback_sms.on_change(self._on_fallback_sms_changed)

    @classmethod
    def from_config(cls, config: Config, view: Optional[PanelView] = None) -> 'SettingsPanel':
        """Build a panel and its API client from loaded panel settings."""
        client = ApiClient(config.api['base_url'], timeout_seconds=float(config.api['timeout_seconds']))
        panel_settings = config.panel
        return cls(
            client,
            view=view,
            notification_seconds=float(panel_settings['notification_seconds']),
            status_refresh_seconds=float(panel_settings['status_refresh_seconds']),
            save_refresh_delay_seconds=float(panel_settings['save_refresh_delay_seconds']),
        )

    # ------------------------------------------------------------------
    # Configuration form
    # ------------------------------------------------------------------

    def render_configuration(self, config: Configuration) -> None:
        """Write a configuration into the form fields without firing change listeners."""
        for attr in STRING_FIELDS:
            getattr(self.view, attr).value = getattr(config, attr)
        for attr in BOOLEAN_FIELDS:
            getattr(self.view, attr).checked = getattr(config, attr)

    def collect_configuration(self) -> Configuration:
        """Read the form fields into a configuration with trimmed strings."""
        values = {attr: getattr(self.view, attr).value for attr in STRING_FIELDS}
        values.update({attr: getattr(self.view, attr).checked for attr in BOOLEAN_FIELDS})
        return Configuration(**values).trimmed()

    async def load(self) -> Optional[Configuration]:
        """
        Fetch the configuration and populate the form.

        Returns:
            The loaded configuration, or None if the request failed
        """
        button = self.view.load_button
        button.set_loading(True)

        try:
            config = await self.client.get_config()
            self.render_configuration(config)
            self.notifier.show('✅ Configuration loaded successfully', NotificationKind.SUCCESS)
            return config
        except RequestError as e:
            self.notifier.show(f'❌ Failed to load configuration: {e.message}', NotificationKind.ERROR)
            return None
        finally:
            button.set_loading(False)

    async def save(self) -> bool:
        """
        Validate the form and submit it as a complete configuration.

        A save requested while the save button is disabled (a previous save
        is still in flight) is ignored.

        Returns:
            True if the backend accepted the configuration
        """
        button = self.view.save_button
        if button.disabled:
            logger.warning("Save already in progress, ignoring request")
            return False

        button.set_loading(True)

        try:
            config = self.collect_configuration()
            validate_configuration(config)

            message = await self.client.save_config(config)
            self.notifier.show(f'✅ {message}', NotificationKind.SUCCESS)
            self._schedule_status_refresh(self.save_refresh_delay_seconds)
            return True
        except PanelError as e:
            self.notifier.show(f'❌ Failed to save configuration: {e}', NotificationKind.ERROR)
            return False
        finally:
            button.set_loading(False)

    async def test_connection(self) -> bool:
        """
        Ask the backend to test its upstream connection.

        Returns:
            True if the backend reported success
        """
        try:
            message = await self.client.test_connection()
        except RequestError as e:
            self.notifier.show(f'❌ Connection test failed: {e.message}', NotificationKind.ERROR)
            return False

        self.notifier.show(f'✅ {message}', NotificationKind.SUCCESS)
        return True

    # ------------------------------------------------------------------
    # Dependent fields
    # ------------------------------------------------------------------

    def _on_battery_monitoring_changed(self, checked: bool) -> None:
        # Charger status reporting needs battery monitoring
        if not checked:
            self.view.charger_status.checked = False

    def _on_fallback_sms_changed(self, checked: bool) -> None:
        trusted_number = self.view.trusted_number
        if checked and not trusted_number.value.strip():
            self.notifier.show(TRUSTED_NUMBER_WARNING, NotificationKind.WARNING)
            trusted_number.focus()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def render_status(self, info: StatusInfo) -> None:
        """Render a status snapshot into the status labels."""
        view = self.view
        if info.service_running:
            view.service_status.text = STATUS_RUNNING
            view.service_status.color = StatusColor.SUCCESS
        else:
            view.service_status.text = STATUS_STOPPED
            view.service_status.color = StatusColor.ERROR

        view.android_version.text = info.android_version or ABSENT_PLACEHOLDER
        view.app_version.text = info.app_version or ABSENT_PLACEHOLDER
        # 0% is a real reading; only a missing level gets the placeholder
        if info.battery_level is not None:
            view.battery_level.text = f'{info.battery_level}%'
        else:
            view.battery_level.text = ABSENT_PLACEHOLDER

    def render_status_error(self) -> None:
        """Show the status error placeholder, leaving the other labels as they were."""
        self.view.service_status.text = STATUS_ERROR
        self.view.service_status.color = StatusColor.ERROR

    async def refresh_status(self) -> Optional[StatusInfo]:
        """
        Fetch and render the status snapshot.

        Failures are rendered as the error placeholder and never raised.

        Returns:
            The snapshot, or None if the request failed
        """
        try:
            info = await self.client.get_info()
        except RequestError as e:
            logger.error(f"Failed to load system info: {e.message}")
            self.render_status_error()
            return None

        self.render_status(info)
        return info

    async def manual_refresh(self) -> Optional[StatusInfo]:
        """Refresh status from the refresh button, showing its loading state."""
        button = self.view.refresh_button
        button.set_loading(True)
        try:
            return await self.refresh_status()
        finally:
            button.set_loading(False)

    def _schedule_status_refresh(self, delay_seconds: float) -> None:
        """Refresh status once after a delay, without waiting for it."""
        task = asyncio.create_task(self._refresh_after(delay_seconds))
        self._pending_refreshes.add(task)
        task.add_done_callback(self._pending_refreshes.discard)

    async def _refresh_after(self, delay_seconds: float) -> None:
        await asyncio.sleep(delay_seconds)
        await self.refresh_status()

    async def _periodic_refresh(self) -> None:
        logger.info(f"Status refresh every {self.status_refresh_seconds} seconds")
        while True:
            await asyncio.sleep(self.status_refresh_seconds)
            await self.refresh_status()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Load the configuration and status, then start the periodic status refresh."""
        await self.load()
        await self.refresh_status()

        if self._refresh_task is None:
            self._refresh_task = asyncio.create_task(self._periodic_refresh())

    async def stop(self) -> None:
        """Stop periodic and pending refreshes and the notification timer."""
        tasks = list(self._pending_refreshes)
        if self._refresh_task is not None:
            tasks.append(self._refresh_task)
            self._refresh_task = None

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        self._pending_refreshes.clear()
        self.notifier.cancel()
        logger.info("Settings panel stopped")

    @property
    def running(self) -> bool:
        """Whether the periodic status refresh is active."""
        return self._refresh_task is not None and not self._refresh_task.done()
