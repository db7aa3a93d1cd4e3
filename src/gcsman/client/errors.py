"""Typed errors raised by the storage HTTP client."""

from typing import Any, Dict, Optional

RETRYABLE_STATUS_CODES = frozenset({408, 429})


class StorageError(Exception):
    """Base error for storage client failures."""

    def __init__(self, message: str, method: str = "", url: str = "", retryable: bool = False):
        """Initialize storage error.

        Args:
            message: Human-readable error message
            method: HTTP method of the failed request
            url: URL of the failed request
            retryable: Whether retrying the request may succeed
        """
        super().__init__(message)
        self.message = message
        self.method = method
        self.url = url
        self.retryable = retryable

    def __str__(self) -> str:
        return self.message


class StorageRequestError(StorageError):
    """Transport-level failure (connection refused, timeout, DNS, ...)."""

    def __init__(self, message: str, method: str, url: str, cause: Optional[Exception] = None):
        super().__init__(message, method=method, url=url, retryable=True)
        self.cause = cause


class StorageApiError(StorageError):
    """Non-success HTTP status returned by the storage service."""

    def __init__(
        self,
        message: str,
        method: str,
        url: str,
        status_code: int,
        reason: str = "",
        response_body: Optional[Any] = None,
        retryable: Optional[bool] = None,
    ):
        """Initialize API error.

        Args:
            message: Error message, usually taken from the JSON error body
            method: HTTP method of the failed request
            url: URL of the failed request
            status_code: HTTP status code
            reason: Machine-readable reason from the error body (e.g. 'notFound')
            response_body: Decoded JSON body or raw text
            retryable: Override the status-code based retry classification
        """
        if retryable is None:
            retryable = status_code in RETRYABLE_STATUS_CODES or 500 <= status_code < 600
        super().__init__(message, method=method, url=url, retryable=retryable)
        self.status_code = status_code
        self.reason = reason
        self.response_body = response_body

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    def to_dict(self) -> Dict[str, Any]:
        """Get technical details for debugging."""
        return {
            "status_code": self.status_code,
            "reason": self.reason,
            "message": self.message,
            "method": self.method,
            "url": self.url,
            "retryable": self.retryable,
        }
