"""Settings panel package."""

from .notifier import Notifier
from .settings_panel import SettingsPanel
from .view_model import (
    PanelView,
    TextField,
    CheckboxField,
    Label,
    Button,
    NotificationArea,
    NotificationKind,
    StatusColor,
)

__all__ = [
    'Notifier',
    'SettingsPanel',
    'PanelView',
    'TextField',
    'CheckboxField',
    'Label',
    'Button',
    'NotificationArea',
    'NotificationKind',
    'StatusColor',
]
