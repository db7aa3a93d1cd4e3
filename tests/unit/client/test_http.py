"""Tests for the storage HTTP client."""

import json

import httpx
import pytest

from gcsman.client.errors import StorageApiError, StorageError, StorageRequestError
from gcsman.client.http import DEFAULT_API_ENDPOINT, StorageHttpClient
from gcsman.client.retry import RetryHandler

BASE_URL = "https://storage.test/storage/v1"


def make_client(handler, max_retries=0, **kwargs):
    """Build a client whose requests are answered by ``handler``."""
    return StorageHttpClient(
        base_url=BASE_URL,
        retry_handler=RetryHandler(max_retries=max_retries, sleep=lambda _: None),
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def error_body(code, message, reason):
    return {"error": {"code": code, "message": message, "errors": [{"reason": reason}]}}


class TestRequests:
    """Test request construction and response decoding."""

    def test_default_endpoint(self):
        assert DEFAULT_API_ENDPOINT == "https://storage.googleapis.com/storage/v1"

    def test_get_decodes_json_and_drops_none_params(self):
        """Test GET builds the URL from the base path and skips None params."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"items": []})

        with make_client(handler) as client:
            result = client.get("/b/photos/o", params={"prefix": "a/", "pageToken": None})

        assert result == {"items": []}
        assert seen[0].url.path == "/storage/v1/b/photos/o"
        assert dict(seen[0].url.params) == {"prefix": "a/"}

    def test_bearer_token_header(self):
        """Test the access token is sent as a bearer header."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        with make_client(handler, access_token="secret-token") as client:
            client.get("/b/photos")

        assert seen[0].headers["Authorization"] == "Bearer secret-token"
        assert seen[0].headers["Accept"] == "application/json"

    def test_no_authorization_without_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        with make_client(handler) as client:
            client.get("/b/photos")

        assert "Authorization" not in seen[0].headers

    def test_patch_sends_json_null(self):
        """Test a body with None values is sent as JSON null."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"name": "photos"})

        with make_client(handler) as client:
            client.patch("/b/photos", json={"acl": None}, params={"predefinedAcl": "private"})

        assert json.loads(seen[0].content) == {"acl": None}
        assert seen[0].url.params["predefinedAcl"] == "private"

    def test_empty_response_returns_none(self):
        with make_client(lambda request: httpx.Response(204)) as client:
            assert client.delete("/b/photos/o/a.jpg") is None

    def test_invalid_json_raises(self):
        """Test an undecodable success body raises StorageApiError(invalidJson)."""
        with make_client(lambda request: httpx.Response(200, content=b"not json")) as client:
            with pytest.raises(StorageApiError) as exc_info:
                client.get("/b/photos")

        assert exc_info.value.reason == "invalidJson"
        assert exc_info.value.retryable is False


class TestErrorMapping:
    """Test HTTP failures map to typed storage errors."""

    def test_status_error_uses_json_error_body(self):
        """Test message and reason are taken from the error body."""

        def handler(request):
            return httpx.Response(404, json=error_body(404, "No such object", "notFound"))

        with make_client(handler) as client:
            with pytest.raises(StorageApiError) as exc_info:
                client.get("/b/photos/o/missing.jpg")

        error = exc_info.value
        assert error.status_code == 404
        assert error.reason == "notFound"
        assert "No such object" in error.message
        assert error.is_not_found
        assert error.retryable is False
        assert error.method == "GET"
        assert error.url.endswith("/b/photos/o/missing.jpg")
        assert error.to_dict()["status_code"] == 404

    def test_status_error_with_text_body(self):
        with make_client(lambda request: httpx.Response(502, text="Bad Gateway")) as client:
            with pytest.raises(StorageApiError) as exc_info:
                client.get("/b/photos")

        assert exc_info.value.response_body == "Bad Gateway"
        assert exc_info.value.retryable is True

    @pytest.mark.parametrize(
        "status_code,retryable",
        [(400, False), (401, False), (403, False), (408, True), (429, True), (500, True),
         (503, True), (507, True)],
    )
    def test_retryable_classification(self, status_code, retryable):
        with make_client(lambda request: httpx.Response(status_code, json={})) as client:
            with pytest.raises(StorageApiError) as exc_info:
                client.get("/b/photos")

        assert exc_info.value.retryable is retryable

    def test_transport_error_maps_to_request_error(self):
        """Test connection failures become retryable StorageRequestError."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with make_client(handler) as client:
            with pytest.raises(StorageRequestError) as exc_info:
                client.get("/b/photos")

        error = exc_info.value
        assert isinstance(error, StorageError)
        assert error.retryable is True
        assert isinstance(error.cause, httpx.ConnectError)
        assert "/b/photos" in error.url


class TestRetries:
    """Test request_json retries retryable failures."""

    def test_retries_then_succeeds(self):
        """Test a 503 followed by success returns the success body."""
        responses = [httpx.Response(503, json={}), httpx.Response(200, json={"ok": True})]
        calls = []

        def handler(request):
            calls.append(request)
            return responses[len(calls) - 1]

        with make_client(handler, max_retries=2) as client:
            assert client.get("/b/photos") == {"ok": True}

        assert len(calls) == 2

    def test_does_not_retry_client_errors(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(403, json=error_body(403, "Forbidden", "forbidden"))

        with make_client(handler, max_retries=3) as client:
            with pytest.raises(StorageApiError):
                client.get("/b/photos")

        assert len(calls) == 1

    def test_retry_disabled(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, json={})

        with make_client(handler, max_retries=3) as client:
            with pytest.raises(StorageApiError):
                client.request_json("GET", "/b/photos", retry=False)

        assert len(calls) == 1

    def test_injected_client_is_not_closed(self):
        """Test a caller-provided httpx.Client stays open after close()."""
        inner = httpx.Client(
            base_url=BASE_URL, transport=httpx.MockTransport(lambda r: httpx.Response(200))
        )
        client = StorageHttpClient(client=inner)

        client.close()

        assert not inner.is_closed
        inner.close()
