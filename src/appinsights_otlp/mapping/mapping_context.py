"""MappingContext dataclass holding per-call conversion state.

The export request and its single ResourceSpans are created once per call and
filled while iterating the records. The counters feed the CLI summary.
"""
from __future__ import annotations

from dataclasses import dataclass

from opentelemetry.proto.collector.trace.v1.trace_service_pb2 import (
    ExportTraceServiceRequest,
)
from opentelemetry.proto.trace.v1.trace_pb2 import ResourceSpans

__all__ = ["MappingContext"]


@dataclass
class MappingContext:
    request: ExportTraceServiceRequest
    resource_spans: ResourceSpans
    converted: int = 0
    skipped: int = 0
    partial: int = 0

    @classmethod
    def create(cls) -> "MappingContext":
        request = ExportTraceServiceRequest()
        return cls(request=request, resource_spans=request.resource_spans.add())
