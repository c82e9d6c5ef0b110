"""Per-request options and how they are written onto an outgoing request."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, ClassVar, Mapping

import httpx
from pydantic import Field, field_validator, model_validator

from .exceptions import DocStoreInvalidArgumentError
from .headers import HttpHeaders, PropertyKeys
from .models import ConsistencyLevel, IndexingDirective, OptionsModel, RequestExtensions
from .request import RequestMessage


def set_session_token(request: RequestMessage, session_token: str | None) -> None:
    """Add the session token header unless the token is missing or blank."""
    if session_token is None or not session_token.strip():
        return
    request.headers.add(HttpHeaders.SESSION_TOKEN, session_token)


def _relative_uri(value: Any) -> httpx.URL:
    if not isinstance(value, httpx.URL) or value.scheme or value.host:
        raise DocStoreInvalidArgumentError(f"{PropertyKeys.RESOURCE_URI} must be a relative URI of type httpx.URL")
    return value


class RequestOptions(OptionsModel):
    """Options shared by every operation.

    Every field is optional and a field left unset adds nothing to the
    request. `is_set` tells an unset field apart from one explicitly set to
    None.

    `custom_request_headers` are the final values for those header names;
    headers the service does not accept may be dropped further down the
    pipeline.

    `base_consistency_level` is storage only. Operation-specific variants
    decide whether to expose it, and its compatibility with the account is
    checked elsewhere. `diagnostics_context_factory` is kept for the
    diagnostics pipeline and never called here.
    """

    if_match_etag: str | None = None
    if_none_match_etag: str | None = None
    custom_request_headers: Mapping[str, str] | None = None
    effective_partition_key_routing: bool = False
    base_consistency_level: ConsistencyLevel | None = None
    diagnostics_context_factory: Callable[[], Any] | None = None
    extensions: RequestExtensions | None = None

    @field_validator("custom_request_headers", mode="after")
    @classmethod
    def _freeze_custom_headers(cls, value: Mapping[str, str] | None) -> Mapping[str, str] | None:
        if value is None:
            return None
        return MappingProxyType(dict(value))

    def populate(self, request: RequestMessage) -> None:
        """Write these options onto `request`.

        Header entries are appended, so calling this twice on the same
        request adds every header twice. Call it once per request.
        """
        if self.extensions is not None:
            for key, value in self.extensions.as_properties().items():
                request.properties[key] = value

        if self.if_match_etag is not None:
            request.headers.add(HttpHeaders.IF_MATCH, self.if_match_etag)

        if self.if_none_match_etag is not None:
            request.headers.add(HttpHeaders.IF_NONE_MATCH, self.if_none_match_etag)

        if self.custom_request_headers is not None:
            for name, value in self.custom_request_headers.items():
                request.headers.add(name, value)

    def try_get_resource_uri(self) -> tuple[httpx.URL | None, bool]:
        """Return the relative resource URI passed through the extensions.

        The named `resource_uri` slot is checked first, then the free-form
        properties under `PropertyKeys.RESOURCE_URI`. Returns `(None, False)`
        when neither is present.

        Raises:
            DocStoreInvalidArgumentError: if the stored value is not a URI or
                is an absolute URI.
        """
        extensions = self.extensions
        if extensions is None:
            return None, False
        if extensions.resource_uri is not None:
            return _relative_uri(extensions.resource_uri), True
        if PropertyKeys.RESOURCE_URI in extensions.properties:
            return _relative_uri(extensions.properties[PropertyKeys.RESOURCE_URI]), True
        return None, False


_SHARED_OPTION_NAMES = frozenset(RequestOptions.model_fields) - {"base_consistency_level"}


class _ComposedRequestOptions(OptionsModel):
    """Operation-specific options wrapping a shared `RequestOptions`.

    Shared fields may be passed as keyword arguments and are moved into
    `common`. The consistency level is only accepted when the variant names
    it in `consistency_option`.
    """

    consistency_option: ClassVar[str | None] = None

    common: RequestOptions = Field(default_factory=RequestOptions)

    @model_validator(mode="before")
    @classmethod
    def _collect_common_options(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        shared = {key: item for key, item in value.items() if key in _SHARED_OPTION_NAMES}
        if cls.consistency_option is not None and cls.consistency_option in value:
            shared["base_consistency_level"] = value[cls.consistency_option]
        if not shared:
            return value
        if "common" in value:
            raise ValueError("pass shared options either inside common or as keyword arguments, not both")
        remaining = {
            key: item
            for key, item in value.items()
            if key not in _SHARED_OPTION_NAMES and key != cls.consistency_option
        }
        remaining["common"] = shared
        return remaining

    def populate(self, request: RequestMessage) -> None:
        """Write variant headers, then the shared options.

        The shared options go last so that custom request headers stay the
        final values for their names.
        """
        self._populate_variant(request)
        self.common.populate(request)

    def _populate_variant(self, request: RequestMessage) -> None:
        pass

    def is_set(self, name: str) -> bool:
        if name in _SHARED_OPTION_NAMES:
            return self.common.is_set(name)
        if name == self.consistency_option:
            return self.common.is_set("base_consistency_level")
        return super().is_set(name)

    def try_get_resource_uri(self) -> tuple[httpx.URL | None, bool]:
        return self.common.try_get_resource_uri()


class ItemRequestOptions(_ComposedRequestOptions):
    """Options for reading and writing a single item."""

    consistency_option: ClassVar[str | None] = "consistency_level"

    session_token: str | None = None
    pre_triggers: list[str] | None = None
    post_triggers: list[str] | None = None
    indexing_directive: IndexingDirective | None = None
    enable_content_response_on_write: bool | None = None

    @property
    def consistency_level(self) -> ConsistencyLevel | None:
        return self.common.base_consistency_level

    def set_consistency_level(self, level: ConsistencyLevel | None) -> None:
        self.common.base_consistency_level = level

    def _populate_variant(self, request: RequestMessage) -> None:
        if self.pre_triggers:
            request.headers.add(HttpHeaders.PRE_TRIGGER_INCLUDE, ",".join(self.pre_triggers))
        if self.post_triggers:
            request.headers.add(HttpHeaders.POST_TRIGGER_INCLUDE, ",".join(self.post_triggers))
        if self.indexing_directive is not None:
            request.headers.add(HttpHeaders.INDEXING_DIRECTIVE, self.indexing_directive.value)
        if self.enable_content_response_on_write is False:
            request.headers.add(HttpHeaders.PREFER, "return=minimal")
        set_session_token(request, self.session_token)


class ContainerRequestOptions(_ComposedRequestOptions):
    """Options for container operations. Consistency does not apply."""

    populate_quota_info: bool = False

    def _populate_variant(self, request: RequestMessage) -> None:
        if self.populate_quota_info:
            request.headers.add(HttpHeaders.POPULATE_QUOTA_INFO, "True")


AnyRequestOptions = RequestOptions | ItemRequestOptions | ContainerRequestOptions


def common_options(options: AnyRequestOptions) -> RequestOptions:
    """Return the shared `RequestOptions` behind any options variant."""
    if isinstance(options, RequestOptions):
        return options
    return options.common
