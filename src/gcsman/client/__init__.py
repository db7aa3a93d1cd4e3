"""HTTP transport for the storage JSON API."""

from .errors import StorageApiError, StorageError, StorageRequestError
from .http import DEFAULT_API_ENDPOINT, StorageHttpClient
from .manager import StorageClientManager
from .retry import RetryHandler

__all__ = [
    "DEFAULT_API_ENDPOINT",
    "RetryHandler",
    "StorageApiError",
    "StorageClientManager",
    "StorageError",
    "StorageHttpClient",
    "StorageRequestError",
]
