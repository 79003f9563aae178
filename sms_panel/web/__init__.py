"""Reference backend package."""

from .connection_tester import TelegramConnectionTester
from .web_server import WebServer, default_info_provider

__all__ = [
    'TelegramConnectionTester',
    'WebServer',
    'default_info_provider',
]
