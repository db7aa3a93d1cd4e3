"""Thin JSON REST client for the storage service over httpx."""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx

from .errors import StorageApiError, StorageRequestError
from .retry import RetryHandler

logger = logging.getLogger(__name__)

DEFAULT_API_ENDPOINT = "https://storage.googleapis.com/storage/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0


def _response_text(response: httpx.Response) -> str:
    """Return response text without raising secondary decode errors."""
    try:
        return response.text
    except Exception:
        return ""


def _parse_error_body(response: httpx.Response) -> Tuple[str, str, Any]:
    """Extract (reason, message, body) from a JSON API error response."""
    try:
        body = response.json()
    except ValueError:
        text = _response_text(response)
        return "", text or response.reason_phrase, text

    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return "", response.reason_phrase, body

    message = error.get("message") or response.reason_phrase
    reason = ""
    details = error.get("errors")
    if isinstance(details, list) and details and isinstance(details[0], dict):
        reason = details[0].get("reason", "")
    return reason, message, body


def _status_error(response: httpx.Response) -> StorageApiError:
    """Build a typed status error from one HTTP response."""
    reason, message, body = _parse_error_body(response)
    return StorageApiError(
        message=f"HTTP {response.status_code} for {response.request.method} "
        f"{response.request.url}: {message}",
        method=response.request.method,
        url=str(response.request.url),
        status_code=response.status_code,
        reason=reason,
        response_body=body,
    )


class StorageHttpClient:
    """Issues JSON API requests and maps failures to typed storage errors."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_ENDPOINT,
        access_token: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        headers: Optional[Mapping[str, str]] = None,
        retry_handler: Optional[RetryHandler] = None,
        transport: Optional[httpx.BaseTransport] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the storage HTTP client.

        Args:
            base_url: JSON API endpoint, e.g. https://storage.googleapis.com/storage/v1
            access_token: Bearer token sent with every request (never refreshed)
            timeout_seconds: Per-request timeout
            headers: Extra headers for every request
            retry_handler: Retry policy; defaults to RetryHandler()
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
            client: Optional preconfigured httpx.Client (not closed by this wrapper)
        """
        request_headers = {"Accept": "application/json"}
        request_headers.update(headers or {})
        if access_token:
            request_headers["Authorization"] = f"Bearer {access_token}"

        self.base_url = base_url
        self.retry_handler = retry_handler or RetryHandler()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=request_headers,
            transport=transport,
        )

    def close(self) -> None:
        """Close underlying transport resources when owned."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "StorageHttpClient":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> httpx.Response:
        """
        Issue one request (no retries).

        Args:
            method: HTTP method
            path: Path relative to the API endpoint, e.g. /b/my-bucket/o
            params: Query parameters; None values are dropped
            json: JSON body

        Returns:
            The successful httpx response

        Raises:
            StorageRequestError: On transport failures
            StorageApiError: On non-success status codes
        """
        query = {key: value for key, value in (params or {}).items() if value is not None}
        kwargs: Dict[str, Any] = {"params": query}
        if json is not None:
            kwargs["json"] = json

        logger.debug(f"{method} {path} params={query}")
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            try:
                request_url = str(exc.request.url)
            except RuntimeError:
                request_url = path
            raise StorageRequestError(
                message=f"HTTP request failed for {method} {request_url}: {exc}",
                method=method,
                url=request_url,
                cause=exc,
            ) from exc

        if response.is_error:
            raise _status_error(response)
        return response

    def request_json(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        retry: bool = True,
    ) -> Optional[Any]:
        """
        Issue one request with retries and decode the JSON body.

        Returns:
            Decoded JSON, or None for empty responses (e.g. 204 from DELETE)

        Raises:
            StorageRequestError: On transport failures after retries
            StorageApiError: On non-success status codes or invalid JSON
        """
        if retry:
            response = self.retry_handler.execute_with_retry(
                self.request, method, path, params=params, json=json
            )
        else:
            response = self.request(method, path, params=params, json=json)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise StorageApiError(
                message=f"Invalid JSON response for {method} {response.request.url}",
                method=method,
                url=str(response.request.url),
                status_code=response.status_code,
                reason="invalidJson",
                response_body=_response_text(response),
                retryable=False,
            ) from exc

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        return self.request_json("GET", path, params=params)

    def post(self, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None):
        return self.request_json("POST", path, params=params, json=json)

    def put(self, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None):
        return self.request_json("PUT", path, params=params, json=json)

    def patch(self, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None):
        return self.request_json("PATCH", path, params=params, json=json)

    def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        return self.request_json("DELETE", path, params=params)
