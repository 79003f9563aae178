"""Toolkit-agnostic view model for the settings panel."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional


class StatusColor(Enum):
    """Color roles a status label can take."""
    DEFAULT = "default"
    SUCCESS = "success"
    ERROR = "error"


class NotificationKind(Enum):
    """Notification types, each rendered with its own style."""
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


@dataclass
class TextField:
    """Single-line text input."""
    value: str = ''
    focused: bool = False

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False


@dataclass
class CheckboxField:
    """
    Checkbox input.

    Assigning ``checked`` is a programmatic update and notifies nobody;
    ``toggle()`` models a user interaction and fires the change listeners
    with the new state.
    """
    checked: bool = False
    _listeners: List[Callable[[bool], None]] = field(default_factory=list, repr=False)

    def on_change(self, listener: Callable[[bool], None]) -> None:
        """Register a listener called with the new state after each toggle."""
        self._listeners.append(listener)

    def toggle(self, checked: Optional[bool] = None) -> None:
        """
        Change the state as a user would.

        Args:
            checked: New state; flips the current state when omitted
        """
        self.checked = (not self.checked) if checked is None else checked
        for listener in self._listeners:
            listener(self.checked)


@dataclass
class Label:
    """Read-only text with a color role."""
    text: str = '-'
    color: StatusColor = StatusColor.DEFAULT


@dataclass
class Button:
    """Action button with a loading state."""
    loading: bool = False
    disabled: bool = False

    def set_loading(self, loading: bool) -> None:
        """Show or clear the loading state; a loading button is disabled."""
        self.loading = loading
        self.disabled = loading


@dataclass
class NotificationArea:
    """The single notification slot at the top of the panel."""
    text: str = ''
    kind: NotificationKind = NotificationKind.INFO
    hidden: bool = True


@dataclass
class PanelView:
    """All fields the settings panel reads and writes."""
    # Configuration form
    bot_token: TextField = field(default_factory=TextField)
    chat_id: TextField = field(default_factory=TextField)
    trusted_number: TextField = field(default_factory=TextField)
    chat_command: CheckboxField = field(default_factory=CheckboxField)
    battery_monitoring: CheckboxField = field(default_factory=CheckboxField)
    charger_status: CheckboxField = field(default_factory=CheckboxField)
    fallback_sms: CheckboxField = field(default_factory=CheckboxField)
    verification_code: CheckboxField = field(default_factory=CheckboxField)
    privacy_mode: CheckboxField = field(default_factory=CheckboxField)
    doh_switch: CheckboxField = field(default_factory=CheckboxField)

    # Status section
    service_status: Label = field(default_factory=Label)
    android_version: Label = field(default_factory=Label)
    app_version: Label = field(default_factory=Label)
    battery_level: Label = field(default_factory=Label)

    # Actions
    load_button: Button = field(default_factory=Button)
    save_button: Button = field(default_factory=Button)
    refresh_button: Button = field(default_factory=Button)

    notification: NotificationArea = field(default_factory=NotificationArea)
