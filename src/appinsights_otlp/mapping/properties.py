"""Custom property filtering and renaming.

Application Insights records carry a free-form ``properties`` object. Each
entry becomes a span attribute under ``applicationinsights.properties.``
unless its key is on the denylist:

    HostInstanceId, ProcessId   already surfaced as resource attributes
    OperationName               already the span name
    LogLevel, Category          logger noise

Values are copied verbatim, empty strings included. This differs from the
other attribute setters, which skip empty values.
"""
from __future__ import annotations

from typing import NamedTuple, Optional

from .semconv import (
    AI_PROPERTIES_PREFIX,
    PROPERTY_CATEGORY,
    PROPERTY_HOST_INSTANCE_ID,
    PROPERTY_LOG_LEVEL,
    PROPERTY_OPERATION_NAME,
    PROPERTY_PROCESS_ID,
)

__all__ = ["SUPPRESSED_PROPERTIES", "MappedProperty", "normalize_key", "map_property"]

SUPPRESSED_PROPERTIES = frozenset(
    {
        PROPERTY_HOST_INSTANCE_ID,
        PROPERTY_PROCESS_ID,
        PROPERTY_OPERATION_NAME,
        PROPERTY_LOG_LEVEL,
        PROPERTY_CATEGORY,
    }
)


class MappedProperty(NamedTuple):
    key: str
    value: str


def normalize_key(key: str) -> str:
    """Lower-case a property key and replace spaces with underscores."""
    return key.lower().replace(" ", "_")


def map_property(key: str, value: Optional[str]) -> Optional[MappedProperty]:
    """Return the span attribute for a custom property, or None if suppressed.

    Denylist matching is case-sensitive, as in the export schema.
    """
    if key in SUPPRESSED_PROPERTIES:
        return None
    return MappedProperty(AI_PROPERTIES_PREFIX + normalize_key(key), value or "")
