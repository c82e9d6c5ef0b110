from __future__ import annotations

import json
import logging

import httpx
import pytest

from docstore_sdk.client import DocStoreClient
from docstore_sdk.exceptions import (
    DocStoreInvalidArgumentError,
    DocStoreNotFoundError,
    DocStorePreconditionFailedError,
    DocStoreRateLimitError,
    DocStoreTimeoutError,
)
from docstore_sdk.headers import HttpHeaders, PropertyKeys
from docstore_sdk.models import ConsistencyLevel, RequestExtensions
from docstore_sdk.request_options import ContainerRequestOptions, ItemRequestOptions, RequestOptions

BASE_URL = "https://account.example.com"


def _client(handler) -> DocStoreClient:
    transport = httpx.MockTransport(handler)
    return DocStoreClient(
        base_url=BASE_URL,
        api_token="test-token",
        httpx_client=httpx.Client(base_url=BASE_URL, transport=transport),
    )


def test_build_request_populates_options_once() -> None:
    client = DocStoreClient(base_url=BASE_URL, api_token="test-token")
    options = ItemRequestOptions(
        if_match_etag='"etag-1"',
        consistency_level=ConsistencyLevel.SESSION,
        custom_request_headers={"X-Custom": "1"},
    )

    message = client.build_request("GET", "/dbs/db1/colls/c1/docs/item1", options=options, session_token="0:1#9")
    client.close()

    assert message.headers.get_all(HttpHeaders.IF_MATCH) == ['"etag-1"']
    assert message.headers.get_all("X-Custom") == ["1"]
    assert message.headers.get_all(HttpHeaders.SESSION_TOKEN) == ["0:1#9"]
    assert message.headers.get_all(HttpHeaders.CONSISTENCY_LEVEL) == ["Session"]
    assert message.headers.get("Authorization") == "Bearer test-token"


def test_build_request_keeps_session_token_from_options() -> None:
    client = DocStoreClient(base_url=BASE_URL)
    message = client.build_request(
        "GET",
        "/dbs/db1/colls/c1/docs/item1",
        options=ItemRequestOptions(session_token="0:1#1"),
        session_token="0:1#2",
    )
    client.close()

    assert message.headers.get_all(HttpHeaders.SESSION_TOKEN) == ["0:1#1"]


def test_build_request_writes_consistency_before_custom_headers() -> None:
    client = DocStoreClient(base_url=BASE_URL)
    options = ItemRequestOptions(
        consistency_level=ConsistencyLevel.EVENTUAL,
        custom_request_headers={HttpHeaders.CONSISTENCY_LEVEL: "Session"},
    )

    message = client.build_request("GET", "/dbs/db1/colls/c1/docs/item1", options=options)
    client.close()

    assert message.headers.get_all(HttpHeaders.CONSISTENCY_LEVEL) == ["Eventual", "Session"]
    assert message.headers.multi_items()[-1] == (HttpHeaders.CONSISTENCY_LEVEL, "Session")


def test_build_request_without_options_adds_only_default_headers() -> None:
    client = DocStoreClient(base_url=BASE_URL)
    message = client.build_request("GET", "/dbs/db1")
    client.close()

    assert [name for name, _ in message.headers] == ["Accept", "User-Agent"]
    assert message.properties == {}


def test_read_item_sends_populated_headers() -> None:
    captured: dict[str, httpx.Request] = {}

    def send_request(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(200, json={"id": "item1", "_etag": '"etag-2"'}, request=request)

    options = RequestOptions(
        if_none_match_etag='"etag-1"',
        custom_request_headers={"X-Custom": "1"},
    )
    with _client(send_request) as client:
        item = client.read_item("db1", "c1", "item1", options=options)

    request = captured["request"]
    assert item == {"id": "item1", "_etag": '"etag-2"'}
    assert request.url.path == "/dbs/db1/colls/c1/docs/item1"
    assert request.headers["If-None-Match"] == '"etag-1"'
    assert request.headers["X-Custom"] == "1"
    assert HttpHeaders.CONSISTENCY_LEVEL not in request.headers


def test_replace_item_sends_body_and_returns_none_on_not_modified() -> None:
    captured: dict[str, object] = {}

    def send_request(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content.decode())
        captured["method"] = request.method
        return httpx.Response(304, request=request)

    with _client(send_request) as client:
        response = client.replace_item("db1", "c1", "item1", {"id": "item1", "n": 1})

    assert response is None
    assert captured == {"body": {"id": "item1", "n": 1}, "method": "PUT"}


def test_resource_uri_override_replaces_path() -> None:
    captured: dict[str, httpx.Request] = {}

    def send_request(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(204, request=request)

    options = RequestOptions(extensions=RequestExtensions(resource_uri=httpx.URL("dbs/mongo/colls/c9/docs/x1")))
    with _client(send_request) as client:
        message = client.build_request("DELETE", "/dbs/db1/colls/c1/docs/item1", options=options)
        client.delete_item("db1", "c1", "item1", options=options)

    assert message.resource_path == "/dbs/mongo/colls/c9/docs/x1"
    assert str(message.properties[PropertyKeys.RESOURCE_URI]) == "dbs/mongo/colls/c9/docs/x1"
    assert captured["request"].url.path == "/dbs/mongo/colls/c9/docs/x1"
    assert PropertyKeys.RESOURCE_URI not in captured["request"].headers


def test_absolute_resource_uri_override_is_rejected_before_sending() -> None:
    def send_request(request: httpx.Request) -> httpx.Response:
        raise AssertionError("request should not be sent")

    options = RequestOptions(
        extensions=RequestExtensions(properties={PropertyKeys.RESOURCE_URI: "https://elsewhere.example.com/dbs/x"})
    )
    with _client(send_request) as client:
        with pytest.raises(DocStoreInvalidArgumentError, match="relative URI"):
            client.read_item("db1", "c1", "item1", options=options)


def test_read_container_with_quota_info() -> None:
    captured: dict[str, httpx.Request] = {}

    def send_request(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(200, json={"id": "c1"}, request=request)

    with _client(send_request) as client:
        container = client.read_container("db1", "c1", options=ContainerRequestOptions(populate_quota_info=True))

    assert container == {"id": "c1"}
    assert captured["request"].url.path == "/dbs/db1/colls/c1"
    assert captured["request"].headers[HttpHeaders.POPULATE_QUOTA_INFO] == "True"


def test_precondition_failure_maps_to_typed_error() -> None:
    def send_request(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            412,
            json={"code": "PreconditionFailed", "message": "Operation cannot be performed."},
            headers={HttpHeaders.ACTIVITY_ID: "activity-1"},
            request=request,
        )

    with _client(send_request) as client:
        with pytest.raises(DocStorePreconditionFailedError) as exc_info:
            client.replace_item("db1", "c1", "item1", {"id": "item1"}, options=RequestOptions(if_match_etag="stale"))

    error = exc_info.value
    assert error.status_code == 412
    assert error.error_code == "PreconditionFailed"
    assert error.request_id == "activity-1"
    assert "Operation cannot be performed." in str(error)


def test_not_found_and_rate_limit_errors() -> None:
    def send_request(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(404, json={"code": "NotFound", "message": "missing"}, request=request)
        return httpx.Response(
            429,
            json={"code": "TooManyRequests", "message": "slow down"},
            headers={HttpHeaders.RETRY_AFTER_MS: "1500"},
            request=request,
        )

    with _client(send_request) as client:
        with pytest.raises(DocStoreNotFoundError):
            client.read_item("db1", "c1", "missing")
        with pytest.raises(DocStoreRateLimitError) as exc_info:
            client.create_item("db1", "c1", {"id": "item1"})

    assert exc_info.value.retry_after == 1.5


def test_timeout_maps_to_timeout_error() -> None:
    def send_request(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with _client(send_request) as client:
        with pytest.raises(DocStoreTimeoutError) as exc_info:
            client.read_item("db1", "c1", "item1")

    assert isinstance(exc_info.value.cause, httpx.ReadTimeout)


def test_item_ids_with_path_separators_are_rejected() -> None:
    client = DocStoreClient(base_url=BASE_URL)
    with pytest.raises(DocStoreInvalidArgumentError, match="path separators"):
        client.read_item("db1", "c1", "a/b")
    client.close()


def test_endpoint_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("DOCSTORE_ENDPOINT", "https://env.example.com/")
    monkeypatch.setenv("DOCSTORE_API_TOKEN", "env-token")

    with DocStoreClient() as client:
        assert client.base_url == "https://env.example.com"
        assert client.api_token == "env-token"


def test_plain_http_endpoint_requires_opt_in() -> None:
    with pytest.raises(DocStoreInvalidArgumentError, match="Non-HTTPS"):
        DocStoreClient(base_url="http://account.example.com")
    with DocStoreClient(base_url="http://localhost:8081") as client:
        assert client.base_url == "http://localhost:8081"


def test_non_http_endpoint_is_rejected() -> None:
    with pytest.raises(DocStoreInvalidArgumentError, match="with a host"):
        DocStoreClient(base_url="ftp://files.example.com")


def test_debug_log_redacts_authorization(caplog) -> None:
    def send_request(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={}, request=request)

    caplog.set_level(logging.DEBUG, logger="docstore_sdk.client")
    with _client(send_request) as client:
        client.read_item("db1", "c1", "item1")

    assert "[REDACTED]" in caplog.text
    assert "test-token" not in caplog.text
