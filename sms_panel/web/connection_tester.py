"""Telegram Bot API connectivity check used by the test endpoint."""

import asyncio
import logging
from typing import Optional, Tuple

import aiohttp


logger = logging.getLogger(__name__)


class TelegramConnectionTester:
    """Checks a bot token against the Telegram Bot API ``getMe`` method."""

    API_URL = "https://api.telegram.org"

    def __init__(self, api_url: Optional[str] = None):
        """
        Initialize tester.

        Args:
            api_url: Bot API root (defaults to the public Telegram endpoint)
        """
        self.api_url = (api_url or self.API_URL).rstrip('/')

    async def test_connectivity(self, bot_token: str, timeout: float = 5.0) -> Tuple[bool, str]:
        """
        Test the bot token.

        Args:
            bot_token: Telegram bot token
            timeout: Request timeout in seconds

        Returns:
            Tuple of (is_connected, message)
        """
        url = f"{self.api_url}/bot{bot_token}/getMe"

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
                    data = await response.json(content_type=None)
        except asyncio.TimeoutError:
            logger.warning("Telegram connection test timed out")
            return False, "connection timeout"
        except (aiohttp.ClientError, ValueError) as e:
            logger.warning(f"Telegram connection test failed: {type(e).__name__}: {e}")
            return False, f"{type(e).__name__}: {str(e)}"

        if not isinstance(data, dict) or not data.get('ok'):
            description = data.get('description') if isinstance(data, dict) else None
            logger.warning(f"Telegram rejected bot token: {description}")
            return False, description or f"HTTP {response.status}"

        username = data.get('result', {}).get('username', 'unknown')
        logger.info(f"Telegram connection test succeeded for @{username}")
        return True, f"Connected to Telegram as @{username}"
