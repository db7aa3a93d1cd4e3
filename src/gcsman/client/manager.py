"""Storage client construction for gcsman."""

import logging
from typing import Any, Dict, Optional

import httpx

from ..utils.config import Config
from .http import StorageHttpClient
from .retry import RetryHandler

logger = logging.getLogger(__name__)


class StorageClientManager:
    """Builds HTTP clients and Storage handles from configuration."""

    def __init__(
        self,
        config: Optional[Config] = None,
        client_config: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the storage client manager.

        Args:
            config: Config instance to read the ``client`` section from
            client_config: Explicit client configuration (overrides ``config``)
            transport: Optional httpx transport injected into every HTTP client
        """
        self.config = config or Config()
        self.client_config = client_config or self.config.get_client_config()
        self.transport = transport
        self._http_client: Optional[StorageHttpClient] = None

    @property
    def user_project(self) -> Optional[str]:
        return self.client_config.get("user_project")

    def get_http_client(self) -> StorageHttpClient:
        """
        Get the shared HTTP client, creating it if needed.

        Returns:
            StorageHttpClient configured from the client section
        """
        if self._http_client is None:
            retry_handler = RetryHandler(
                max_retries=self.client_config.get("max_retries", 3),
                base_delay=self.client_config.get("retry_base_delay", 1.0),
                max_delay=self.client_config.get("retry_max_delay", 60.0),
            )
            if not self.client_config.get("access_token"):
                logger.debug("No access token configured; sending unauthenticated requests")
            self._http_client = StorageHttpClient(
                base_url=self.client_config["api_endpoint"],
                access_token=self.client_config.get("access_token"),
                timeout_seconds=self.client_config.get("timeout_seconds", 30.0),
                retry_handler=retry_handler,
                transport=self.transport,
            )
        return self._http_client

    def get_storage(self) -> Any:
        """
        Get a Storage handle bound to the shared HTTP client.

        Returns:
            Storage instance
        """
        from ..resources.storage import Storage

        return Storage(self.get_http_client(), user_project=self.user_project)

    def close(self) -> None:
        """Close the shared HTTP client if one was created."""
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None
