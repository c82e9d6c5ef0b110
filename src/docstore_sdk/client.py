"""Synchronous client for the DocStore REST API."""

from __future__ import annotations

import logging
import os
from types import MappingProxyType
from typing import Any, Mapping

import httpx

from .exceptions import (
    DocStoreAuthError,
    DocStoreHTTPError,
    DocStoreInvalidArgumentError,
    DocStoreNetworkError,
    DocStoreNotFoundError,
    DocStorePreconditionFailedError,
    DocStoreRateLimitError,
    DocStoreTimeoutError,
)
from .headers import HttpHeaders
from .models import ErrorResponse
from .request import RequestMessage
from .request_options import (
    AnyRequestOptions,
    ContainerRequestOptions,
    ItemRequestOptions,
    RequestOptions,
    common_options,
    set_session_token,
)
from .security import retry_after_seconds, sanitize_headers, validate_base_url

logger = logging.getLogger(__name__)


def _coerce_json_payload(payload: Any) -> Any:
    if payload is None:
        return None
    if isinstance(payload, Mapping):
        return dict(payload)
    return payload


def _normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    clean: dict[str, str] = {}
    for key, value in headers.items():
        clean[str(key)] = str(value)
    return clean


def _segment(name: str, value: str) -> str:
    if not value or "/" in value or "\\" in value or "\x00" in value:
        raise DocStoreInvalidArgumentError(f"{name} must be a non-empty id without path separators")
    return value


def _container_path(database: str, container: str) -> str:
    return f"/dbs/{_segment('database', database)}/colls/{_segment('container', container)}"


def _item_path(database: str, container: str, item_id: str | None = None) -> str:
    path = f"{_container_path(database, container)}/docs"
    if item_id is not None:
        path += f"/{_segment('item_id', item_id)}"
    return path


class DocStoreClient:
    """Synchronous client.

    Every operation builds one `RequestMessage`, lets the request options
    populate it exactly once, and sends it through httpx.
    """

    default_base_url = "https://localhost:8081"
    default_timeout = 30.0

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float = default_timeout,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = True,
        httpx_client: httpx.Client | None = None,
        allow_http: bool = False,
        token_env_var: str = "DOCSTORE_API_TOKEN",
        base_url_env_var: str = "DOCSTORE_ENDPOINT",
    ) -> None:
        self.base_url = (base_url or os.getenv(base_url_env_var) or self.default_base_url).rstrip("/")
        validate_base_url(self.base_url, allow_http=allow_http)
        self.api_token = api_token or os.getenv(token_env_var)
        if timeout <= 0:
            raise DocStoreInvalidArgumentError("timeout must be greater than 0")
        self.timeout = float(timeout)
        self._default_headers = {
            "Accept": "application/json",
            "User-Agent": "docstore-python-sdk/0.1.0",
        }
        if self.api_token:
            self._default_headers["Authorization"] = f"Bearer {self.api_token}"
        if headers:
            self._default_headers.update(_normalize_headers(headers))

        self._httpx = httpx_client or httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            follow_redirects=follow_redirects,
            trust_env=False,
        )

    def __enter__(self) -> "DocStoreClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._httpx.close()

    @staticmethod
    def _path(path: str) -> str:
        if "://" in path:
            raise DocStoreInvalidArgumentError("Full URLs are not allowed in path for request method")
        if not path.startswith("/"):
            raise DocStoreInvalidArgumentError("Path must be absolute and start with '/'")
        if "\x00" in path:
            raise DocStoreInvalidArgumentError("Invalid path characters")
        return path

    def build_request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any | None = None,
        options: AnyRequestOptions | None = None,
        session_token: str | None = None,
    ) -> RequestMessage:
        """Build the request for one operation.

        A resource URI passed through the options' extensions replaces
        `path`. `session_token` is added only when the options did not
        already supply one.
        """
        options = options if options is not None else RequestOptions()
        path = self._path(path)
        resource_uri, found = options.try_get_resource_uri()
        if found:
            override = self._path("/" + str(resource_uri).lstrip("/"))
            logger.debug("Using resource URI override %s instead of %s", override, path)
            path = override

        request = RequestMessage(method, path, content=_coerce_json_payload(json_data))
        for name, value in self._default_headers.items():
            request.headers.add(name, value)

        level = common_options(options).base_consistency_level
        if level is not None:
            request.headers.add(HttpHeaders.CONSISTENCY_LEVEL, level.value)

        options.populate(request)

        if HttpHeaders.SESSION_TOKEN not in request.headers:
            set_session_token(request, session_token)
        return request

    def send(self, request: RequestMessage) -> httpx.Response:
        httpx_request = request.to_httpx(self.base_url, timeout=self.timeout)
        logger.debug(
            "%s %s headers=%s",
            request.method,
            request.resource_path,
            sanitize_headers(request.headers.multi_items()),
        )
        try:
            response = self._httpx.send(httpx_request)
        except httpx.TimeoutException as exc:
            raise DocStoreTimeoutError("Request timed out", cause=exc) from exc
        except httpx.NetworkError as exc:
            raise DocStoreNetworkError("Network error", cause=exc) from exc
        logger.debug("%s %s -> %s", request.method, request.resource_path, response.status_code)
        return response

    def request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any | None = None,
        options: AnyRequestOptions | None = None,
        session_token: str | None = None,
    ) -> Any:
        message = self.build_request(
            method,
            path,
            json_data=json_data,
            options=options,
            session_token=session_token,
        )
        response = self.send(message)
        self._raise_for_status(response)
        return self._parse_response(response)

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code < 400:
            return
        raw_body = None
        parsed_body = None
        content_type = response.headers.get("content-type", "")
        try:
            raw_body = response.text
            if "application/json" in content_type.lower():
                parsed_body = response.json()
        except ValueError:
            parsed_body = None

        message = str(parsed_body or raw_body or "request failed")
        error_code = None
        if isinstance(parsed_body, Mapping):
            error = ErrorResponse.model_validate(parsed_body)
            message = error.message or message
            error_code = error.code

        retry_after = retry_after_seconds(response.headers)
        kwargs = {
            "status_code": response.status_code,
            "error_code": error_code,
            "body": parsed_body or raw_body,
            "headers": MappingProxyType(dict(response.headers)),
            "request_id": response.headers.get(HttpHeaders.ACTIVITY_ID),
            "retry_after": retry_after,
        }
        if response.status_code in {401, 403}:
            raise DocStoreAuthError(message, **kwargs)
        if response.status_code == 404:
            raise DocStoreNotFoundError(message, **kwargs)
        if response.status_code == 412:
            raise DocStorePreconditionFailedError(message, **kwargs)
        if response.status_code == 429:
            raise DocStoreRateLimitError(message, **kwargs)
        raise DocStoreHTTPError(message, **kwargs)

    @staticmethod
    def _parse_response(response: httpx.Response) -> Any:
        if response.status_code in {204, 304}:
            return None
        if not response.content:
            return None
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type.lower():
            return response.text
        return response.json()

    def read_container(
        self,
        database: str,
        container: str,
        *,
        options: ContainerRequestOptions | RequestOptions | None = None,
    ) -> dict[str, Any]:
        return self.request("GET", _container_path(database, container), options=options)

    def read_item(
        self,
        database: str,
        container: str,
        item_id: str,
        *,
        options: ItemRequestOptions | RequestOptions | None = None,
        session_token: str | None = None,
    ) -> dict[str, Any] | None:
        return self.request(
            "GET",
            _item_path(database, container, item_id),
            options=options,
            session_token=session_token,
        )

    def create_item(
        self,
        database: str,
        container: str,
        body: Mapping[str, Any],
        *,
        options: ItemRequestOptions | RequestOptions | None = None,
        session_token: str | None = None,
    ) -> dict[str, Any] | None:
        return self.request(
            "POST",
            _item_path(database, container),
            json_data=body,
            options=options,
            session_token=session_token,
        )

    def replace_item(
        self,
        database: str,
        container: str,
        item_id: str,
        body: Mapping[str, Any],
        *,
        options: ItemRequestOptions | RequestOptions | None = None,
        session_token: str | None = None,
    ) -> dict[str, Any] | None:
        return self.request(
            "PUT",
            _item_path(database, container, item_id),
            json_data=body,
            options=options,
            session_token=session_token,
        )

    def delete_item(
        self,
        database: str,
        container: str,
        item_id: str,
        *,
        options: ItemRequestOptions | RequestOptions | None = None,
        session_token: str | None = None,
    ) -> None:
        self.request(
            "DELETE",
            _item_path(database, container, item_id),
            options=options,
            session_token=session_token,
        )
