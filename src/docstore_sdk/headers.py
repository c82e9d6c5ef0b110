"""Header names and well-known extension-property keys shared across the SDK."""

from __future__ import annotations


class HttpHeaders:
    IF_MATCH = "If-Match"
    IF_NONE_MATCH = "If-None-Match"
    PREFER = "Prefer"
    SESSION_TOKEN = "x-ms-session-token"
    CONSISTENCY_LEVEL = "x-ms-consistency-level"
    PRE_TRIGGER_INCLUDE = "x-ms-documentdb-pre-trigger-include"
    POST_TRIGGER_INCLUDE = "x-ms-documentdb-post-trigger-include"
    INDEXING_DIRECTIVE = "x-ms-indexing-directive"
    POPULATE_QUOTA_INFO = "x-ms-documentdb-populatequotainfo"
    ACTIVITY_ID = "x-ms-activity-id"
    RETRY_AFTER_MS = "x-ms-retry-after-ms"


class PropertyKeys:
    """Keys used in a request's extension properties.

    Extension properties travel with a request inside the process and are
    never written to the wire.
    """

    RESOURCE_URI = "ResourceUri"
