"""SDK-specific exceptions."""

from __future__ import annotations

from typing import Mapping


class DocStoreError(Exception):
    """Base exception for all DocStore SDK failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_code: str | None = None,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        request_id: str | None = None,
        retry_after: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.body = body
        self.headers = dict(headers) if headers is not None else {}
        self.request_id = request_id
        self.retry_after = retry_after
        self.cause = cause

    def __str__(self) -> str:
        if self.status_code is None:
            return str(self.args[0])
        parts = [f"{self.status_code}"]
        if self.error_code:
            parts.append(self.error_code)
        return " ".join(parts) + f": {self.args[0]}"


class DocStoreInvalidArgumentError(DocStoreError, ValueError):
    """Raised when a caller-supplied value has the wrong type or shape."""


class DocStoreHTTPError(DocStoreError):
    """Raised for HTTP non-success responses."""


class DocStoreNotFoundError(DocStoreHTTPError):
    """Raised for HTTP 404 responses."""


class DocStorePreconditionFailedError(DocStoreHTTPError):
    """Raised for HTTP 412 responses, typically a stale If-Match ETag."""


class DocStoreAuthError(DocStoreHTTPError):
    """Raised for authentication and authorization failures."""


class DocStoreRateLimitError(DocStoreHTTPError):
    """Raised for HTTP 429 responses."""


class DocStoreNetworkError(DocStoreError):
    """Raised for transport-level failures like DNS and TCP errors."""


class DocStoreTimeoutError(DocStoreError):
    """Raised when a request exceeds configured timeout."""
