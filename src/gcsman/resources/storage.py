"""Entry point to the storage service."""

from typing import Optional

from ..client.http import StorageHttpClient
from .bucket import Bucket


class Storage:
    """Entry point that hands out Bucket handles sharing one HTTP client."""

    def __init__(self, http_client: StorageHttpClient, user_project: Optional[str] = None):
        """
        Initialize the storage service handle.

        Args:
            http_client: Client used for every request
            user_project: Default project billed for requester-pays buckets
        """
        self.http_client = http_client
        self.user_project = user_project

    def bucket(self, name: str, user_project: Optional[str] = None) -> Bucket:
        """Get a Bucket handle (no request is made)."""
        return Bucket(self, name, user_project=user_project)
