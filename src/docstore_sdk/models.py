"""Typed enums and models shared by request options and the client."""

from __future__ import annotations

from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .headers import PropertyKeys


class DocStoreModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class OptionsModel(BaseModel):
    """Base for caller-built option objects.

    Unknown fields are rejected and assignments are validated, so a typo in
    an option name fails loudly instead of being dropped.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True, arbitrary_types_allowed=True)

    def is_set(self, name: str) -> bool:
        """Return True if `name` was explicitly assigned, even to None."""
        if name not in type(self).model_fields:
            raise AttributeError(f"{type(self).__name__} has no option {name!r}")
        return name in self.model_fields_set


class ConsistencyLevel(str, Enum):
    STRONG = "Strong"
    BOUNDED_STALENESS = "BoundedStaleness"
    SESSION = "Session"
    EVENTUAL = "Eventual"
    CONSISTENT_PREFIX = "ConsistentPrefix"


class IndexingDirective(str, Enum):
    DEFAULT = "Default"
    INCLUDE = "Include"
    EXCLUDE = "Exclude"


class RequestExtensions(OptionsModel):
    """Out-of-band values carried on a request for other SDK layers.

    `resource_uri` lets protocol emulation layers hand over a pre-resolved
    relative resource path. `properties` holds anything else and is copied
    onto the request without interpretation.
    """

    resource_uri: httpx.URL | None = None
    properties: dict[str, Any] = Field(default_factory=dict)

    def as_properties(self) -> dict[str, Any]:
        flattened = dict(self.properties)
        if self.resource_uri is not None:
            flattened[PropertyKeys.RESOURCE_URI] = self.resource_uri
        return flattened


class ErrorResponse(DocStoreModel):
    code: str | None = None
    message: str | None = None
