"""Security and header helpers."""

from __future__ import annotations

import datetime as _dt
from email.utils import parsedate_to_datetime
from typing import Iterable, Mapping
from urllib.parse import urlparse

from .exceptions import DocStoreInvalidArgumentError
from .headers import HttpHeaders


SENSITIVE_HEADERS = {
    "authorization",
    "x-api-key",
}

LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


def sanitize_headers(headers: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    """Return header entries with sensitive values redacted for logging."""
    return [
        (key, "[REDACTED]" if key.lower() in SENSITIVE_HEADERS else value)
        for key, value in headers
    ]


def validate_base_url(url: str, *, allow_http: bool = False) -> None:
    """Reject service endpoints that are not plain https URLs.

    Plain http is only accepted for a loopback emulator or with `allow_http`.
    """
    if "\x00" in url:
        raise DocStoreInvalidArgumentError("endpoint contains invalid characters")
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise DocStoreInvalidArgumentError(f"endpoint must be an http(s) URL with a host, got {url!r}")
    host = (parsed.hostname or "").lower()
    if parsed.scheme == "http" and not allow_http and host not in LOOPBACK_HOSTS:
        raise DocStoreInvalidArgumentError("Non-HTTPS endpoint is not allowed without allow_http=True")


def _seconds_until(raw: str) -> float | None:
    try:
        when = parsedate_to_datetime(raw)
    except (ValueError, TypeError, OverflowError):
        return None
    if when is None:
        return None
    if when.utcoffset() is None:
        when = when.replace(tzinfo=_dt.timezone.utc)
    delta = when - _dt.datetime.now(_dt.timezone.utc)
    return max(0.0, delta.total_seconds())


def retry_after_seconds(headers: Mapping[str, str]) -> float | None:
    """Return the server's retry hint in seconds.

    `x-ms-retry-after-ms` wins over the standard `Retry-After`, which may be
    either a number of seconds or an HTTP date.
    """
    raw_ms = (headers.get(HttpHeaders.RETRY_AFTER_MS) or "").strip()
    if raw_ms:
        try:
            return max(0.0, float(raw_ms) / 1000.0)
        except ValueError:
            pass

    raw = (headers.get("Retry-After") or "").strip()
    if not raw:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        return _seconds_until(raw)
