"""Backend API client package."""

from .api_client import ApiClient, RequestError

__all__ = [
    'ApiClient',
    'RequestError',
]
