"""Settings panel and reference backend for the Telegram SMS forwarding service."""

from .version import __version__

__all__ = ['__version__']
