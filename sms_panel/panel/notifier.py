"""Ephemeral notifications for the settings panel."""

import asyncio
import logging
from typing import Optional

from .view_model import NotificationArea, NotificationKind


logger = logging.getLogger(__name__)


class Notifier:
    """
    Shows one notification at a time in a NotificationArea.

    Each notification replaces the current one and hides itself after
    ``duration_seconds``. The notifier owns the single pending hide timer and
    cancels it whenever a new notification is shown, so an older timer can
    never hide a newer message.
    """

    def __init__(self, area: NotificationArea, duration_seconds: float = 5,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Initialize notifier.

        Args:
            area: Notification area of the panel view
            duration_seconds: How long each notification stays visible
            loop: Event loop for the hide timer (defaults to the running loop)
        """
        self.area = area
        self.duration_seconds = duration_seconds
        self._loop = loop
        self._timer: Optional[asyncio.TimerHandle] = None

    def show(self, message: str, kind: NotificationKind = NotificationKind.INFO) -> None:
        """
        Display a notification, replacing any visible one.

        Must be called from within the event loop.
        """
        self.cancel()

        self.area.text = message
        self.area.kind = kind
        self.area.hidden = False

        if kind is NotificationKind.ERROR:
            logger.error(f"Notification: {message}")
        elif kind is NotificationKind.WARNING:
            logger.warning(f"Notification: {message}")
        else:
            logger.info(f"Notification: {message}")

        loop = self._loop or asyncio.get_running_loop()
        self._timer = loop.call_later(self.duration_seconds, self.hide)

    def hide(self) -> None:
        """Hide the current notification."""
        self.cancel()
        self.area.hidden = True

    def cancel(self) -> None:
        """Cancel the pending hide timer, if any, leaving the area as is."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @property
    def pending(self) -> bool:
        """Whether a hide is scheduled."""
        return self._timer is not None
