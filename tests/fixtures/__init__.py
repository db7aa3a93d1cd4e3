"""Test fixtures package for gcsman.

- storage_api: in-memory fake of the storage JSON API (httpx.MockTransport)
  plus ``storage_server`` and ``storage`` pytest fixtures

Usage:
    from tests.fixtures.storage_api import FakeStorageServer, make_http_client
"""

from .storage_api import BASE_URL, FakeStorageServer, make_http_client, storage, storage_server

__all__ = ["BASE_URL", "FakeStorageServer", "make_http_client", "storage", "storage_server"]
