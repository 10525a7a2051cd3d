"""Public facade for Application Insights to OTLP conversion.

All mapping logic is delegated to `appinsights_otlp.mapping.orchestrator` and
its helpers in the `appinsights_otlp.mapping` package.

Public Functions:
    convert_document: Convert an export document to ExportTraceServiceRequest

Re-exports:
    TelemetryBatchConverter: Converter class (``run`` also returns counters)
    MappingContext: Result of ``TelemetryBatchConverter.run``
"""
from __future__ import annotations

from opentelemetry.proto.collector.trace.v1.trace_service_pb2 import (
    ExportTraceServiceRequest,
)

from .mapping.mapping_context import MappingContext
from .mapping.orchestrator import Document, TelemetryBatchConverter

__all__ = ["convert_document", "TelemetryBatchConverter", "MappingContext", "Document"]


def convert_document(document: Document) -> ExportTraceServiceRequest:
    """Convert an Application Insights export document to an OTLP request.

    Args:
        document: Parsed JSON mapping, or raw JSON text/bytes, with a
            top-level ``records`` array

    Returns:
        ExportTraceServiceRequest with one ResourceSpans holding one
        ScopeSpans (and one span) per converted record

    Raises:
        ConversionError: any fatal problem; no partial result is returned
        pydantic.ValidationError: a record field has the wrong JSON type
    """
    return TelemetryBatchConverter().convert(document)
