"""Span kind classification from telemetry type and dependency type.

Mirrors the Azure Monitor exporter mapping read in reverse:

    SERVER   <- request telemetry
    CLIENT   <- dependency telemetry
    PRODUCER <- dependency telemetry of a "Queue Message | ..." type

CONSUMER and INTERNAL are never produced. Unknown telemetry types fall back
to SERVER.
"""
from __future__ import annotations

from opentelemetry.proto.trace.v1.trace_pb2 import Span

from .semconv import DEPENDENCY_TYPES, MESSAGING_PREFIX, REQUEST_TYPES

__all__ = ["classify_span_kind"]


def classify_span_kind(telemetry_type: str, dependency_type: str = "") -> int:
    """Map (telemetry type, dependency type) to an OTLP ``Span.SpanKind`` value.

    Args:
        telemetry_type: Record ``type`` field ("Requests", "Dependencies", ...)
        dependency_type: Record ``dependencyType``; ignored for non-dependencies

    Returns:
        ``Span.SPAN_KIND_SERVER``, ``Span.SPAN_KIND_CLIENT`` or
        ``Span.SPAN_KIND_PRODUCER``
    """
    if telemetry_type in REQUEST_TYPES:
        return Span.SPAN_KIND_SERVER
    if telemetry_type in DEPENDENCY_TYPES:
        if (dependency_type or "").lower().startswith(MESSAGING_PREFIX):
            return Span.SPAN_KIND_PRODUCER
        return Span.SPAN_KIND_CLIENT
    return Span.SPAN_KIND_SERVER
