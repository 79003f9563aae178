"""HTTP client for the panel backend API."""

import aiohttp
import asyncio
import json
import logging
from typing import Dict, Any, Optional

from ..config.settings_model import Configuration, StatusInfo, PanelError


logger = logging.getLogger(__name__)


GENERIC_FAILURE_MESSAGE = 'Request failed'


class RequestError(PanelError):
    """Network failure or non-success response from the backend."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class ApiClient:
    """Client for the ``/api`` endpoints served by the backend."""

    def __init__(self, base_url: str, timeout_seconds: float = 10):
        """
        Initialize API client.

        Args:
            base_url: Base URL of the API, e.g. ``http://127.0.0.1:8080/api``
            timeout_seconds: Total timeout applied to each request
        """
        self.base_url = base_url.rstrip('/')
        self.timeout_seconds = timeout_seconds

    async def request(self, endpoint: str, method: str = 'GET',
                      body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Make a JSON request against the API.

        Args:
            endpoint: Path below the base URL, e.g. ``/config``
            method: HTTP method
            body: JSON body to send (never sent for GET)

        Returns:
            Decoded JSON object from a successful response

        Raises:
            RequestError: On network failure, timeout, non-2xx status or an
                undecodable response body
        """
        url = self.base_url + endpoint
        headers = {'Content-Type': 'application/json'}
        data = json.dumps(body) if body is not None and method != 'GET' else None

        logger.debug(f"API request: {method} {url}")

        try:
            async with aiohttp.ClientSession() as session:
                async with session.request(
                    method, url, data=data, headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
                ) as response:
                    logger.debug(f"Received HTTP response with status: {response.status}")
                    payload = await self._read_json(response)

                    if not 200 <= response.status < 300:
                        message = self._error_message(payload)
                        logger.error(f"API error: {method} {endpoint} -> {response.status}: {message}")
                        raise RequestError(message, status=response.status)

                    if not isinstance(payload, dict):
                        logger.error(f"API error: {method} {endpoint} returned a non-object body")
                        raise RequestError('Invalid response from server', status=response.status)

                    return payload
        except asyncio.TimeoutError:
            logger.error(f"API error: {method} {endpoint} timed out after {self.timeout_seconds} seconds")
            raise RequestError(f"Request timed out after {self.timeout_seconds} seconds")
        except aiohttp.ClientError as e:
            logger.error(f"API error: {method} {endpoint}: {type(e).__name__}: {e}")
            raise RequestError(f"Unable to reach server: {e}")

    @staticmethod
    async def _read_json(response: aiohttp.ClientResponse) -> Any:
        """Decode a response body as JSON, returning None if it is not JSON."""
        try:
            return await response.json(content_type=None)
        except (ValueError, aiohttp.ContentTypeError) as e:
            logger.debug(f"Response body is not JSON: {e}")
            return None

    @staticmethod
    def _error_message(payload: Any) -> str:
        """Pick the server-provided message from an error body."""
        if isinstance(payload, dict):
            for key in ('message', 'error'):
                message = payload.get(key)
                if message:
                    return str(message)
        return GENERIC_FAILURE_MESSAGE

    async def get_config(self) -> Configuration:
        """Fetch the current configuration."""
        data = await self.request('/config')
        return Configuration.from_dict(data)

    async def save_config(self, config: Configuration) -> str:
        """
        Submit a complete configuration.

        Returns:
            The server's confirmation message
        """
        data = await self.request('/config', 'POST', config.to_dict())
        return str(data.get('message', ''))

    async def get_info(self) -> StatusInfo:
        """Fetch the service status snapshot."""
        data = await self.request('/info')
        return StatusInfo.from_dict(data)

    async def test_connection(self) -> str:
        """Ask the backend to check its upstream connection."""
        data = await self.request('/test')
        return str(data.get('message', ''))
