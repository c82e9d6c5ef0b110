"""Outgoing request representation filled in by request options."""

from __future__ import annotations

from typing import Any, Iterator

import httpx


class RequestHeaders:
    """Additive header collection.

    `add` appends and never replaces, so the same name may appear more than
    once. Lookups are case-insensitive.
    """

    def __init__(self, items: list[tuple[str, str]] | None = None) -> None:
        self._items: list[tuple[str, str]] = []
        for name, value in items or []:
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        self._items.append((str(name), str(value)))

    def get(self, name: str, default: str | None = None) -> str | None:
        values = self.get_all(name)
        return values[0] if values else default

    def get_all(self, name: str) -> list[str]:
        lowered = name.lower()
        return [value for key, value in self._items if key.lower() == lowered]

    def multi_items(self) -> list[tuple[str, str]]:
        return list(self._items)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return bool(self.get_all(name))

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"RequestHeaders({self._items!r})"


class RequestMessage:
    """A single request on its way to the service.

    `properties` are in-process values for other SDK layers and are not part
    of the wire request.
    """

    def __init__(
        self,
        method: str,
        resource_path: str,
        *,
        content: Any | None = None,
        headers: RequestHeaders | None = None,
        properties: dict[str, Any] | None = None,
    ) -> None:
        self.method = method.upper()
        self.resource_path = resource_path
        self.content = content
        self.headers = headers if headers is not None else RequestHeaders()
        self.properties: dict[str, Any] = properties if properties is not None else {}

    def to_httpx(self, base_url: str | httpx.URL | None = None, *, timeout: float | None = None) -> httpx.Request:
        """Build the wire request. Every header entry is kept, duplicates included."""
        url = httpx.URL(self.resource_path)
        if base_url is not None:
            url = httpx.URL(base_url).join(self.resource_path)
        extensions = {}
        if timeout is not None:
            extensions["timeout"] = httpx.Timeout(timeout).as_dict()
        return httpx.Request(
            self.method,
            url,
            headers=self.headers.multi_items(),
            json=self.content,
            extensions=extensions,
        )

    def __repr__(self) -> str:
        return f"RequestMessage({self.method!r}, {self.resource_path!r})"
