"""Python SDK for the DocStore document database service."""

from .client import DocStoreClient
from .exceptions import (
    DocStoreAuthError,
    DocStoreError,
    DocStoreHTTPError,
    DocStoreInvalidArgumentError,
    DocStoreNetworkError,
    DocStoreNotFoundError,
    DocStorePreconditionFailedError,
    DocStoreRateLimitError,
    DocStoreTimeoutError,
)
from .headers import HttpHeaders, PropertyKeys
from .models import ConsistencyLevel, IndexingDirective, RequestExtensions
from .request import RequestHeaders, RequestMessage
from .request_options import (
    ContainerRequestOptions,
    ItemRequestOptions,
    RequestOptions,
    set_session_token,
)

__all__ = [
    "ConsistencyLevel",
    "ContainerRequestOptions",
    "DocStoreAuthError",
    "DocStoreClient",
    "DocStoreError",
    "DocStoreHTTPError",
    "DocStoreInvalidArgumentError",
    "DocStoreNetworkError",
    "DocStoreNotFoundError",
    "DocStorePreconditionFailedError",
    "DocStoreRateLimitError",
    "DocStoreTimeoutError",
    "HttpHeaders",
    "IndexingDirective",
    "ItemRequestOptions",
    "PropertyKeys",
    "RequestExtensions",
    "RequestHeaders",
    "RequestMessage",
    "RequestOptions",
    "set_session_token",
]
