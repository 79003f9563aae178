"""Version information for the Telegram SMS settings panel."""

__version__ = "1.0.0"
