"""Batch orchestration: Application Insights records to one OTLP export request.

Pure functions only, no network I/O. One pass over the ``records`` array;
each usable record becomes exactly one span inside its own ScopeSpans.

Error handling:
    - missing/empty operationId: WARNING, record skipped
    - dependency extraction failure: ERROR, span emitted with partial data
    - dependency field of the wrong JSON type: same as an extraction failure
    - anything else (bad JSON shape, malformed ids or timestamps, absent
      durationMs, record validation errors, a non-string span name on a
      non-dependency record): propagates, batch aborted

Resource quirk:
    All spans share a single ResourceSpans whose resource is replaced for
    every converted record, so the emitted resource describes the last
    converted record only.
"""
from __future__ import annotations

import json
import logging
from typing import Any, List, Mapping, Tuple, Union

from opentelemetry.proto.collector.trace.v1.trace_service_pb2 import (
    ExportTraceServiceRequest,
)
from opentelemetry.proto.common.v1.common_pb2 import InstrumentationScope
from opentelemetry.proto.resource.v1.resource_pb2 import Resource
from opentelemetry.proto.trace.v1.trace_pb2 import Span

from ..errors import MalformedDocumentError, MissingFieldError
from ..models.appinsights import OPERATION_ID_KEYS, TelemetryRecord
from .attributes import string_attribute
from .dependency import extract_dependency
from .id_utils import SPAN_ID_BYTES, TRACE_ID_BYTES, hex_to_bytes
from .mapping_context import MappingContext
from .properties import map_property
from .resource import extract_resource_attributes
from .semconv import DEFAULT_SCOPE_NAME, DEPENDENCY_TYPES
from .span_kind import classify_span_kind
from .time_utils import to_epoch_nanos, to_epoch_nanos_plus_duration

logger = logging.getLogger(__name__)

__all__ = ["Document", "TelemetryBatchConverter", "load_records", "parse_sdk_version"]

Document = Union[str, bytes, bytearray, Mapping[str, Any]]

RECORDS_KEY = "records"


def load_records(document: Document) -> List[Any]:
    """Return the ``records`` array of a parsed or raw JSON document.

    Raises:
        MalformedDocumentError: invalid JSON, non-object root, or missing /
            non-array ``records``
    """
    if isinstance(document, (str, bytes, bytearray)):
        try:
            document = json.loads(document)
        except ValueError as e:
            raise MalformedDocumentError(f"input is not valid JSON: {e}") from e
    if not isinstance(document, Mapping):
        raise MalformedDocumentError(
            f"document root must be an object, got {type(document).__name__}"
        )
    records = document.get(RECORDS_KEY)
    if not isinstance(records, list):
        raise MalformedDocumentError(f"document has no '{RECORDS_KEY}' array")
    return records


def parse_sdk_version(sdk_version: str) -> Tuple[str, str]:
    """Split ``"<name>:<version>"`` into instrumentation scope name and version.

    >>> parse_sdk_version("dotnetc:2.21.0-429")
    ('dotnetc', '2.21.0-429')
    >>> parse_sdk_version("")
    ('applicationinsights', '')
    """
    parts = sdk_version.split(":")
    name = parts[0] or DEFAULT_SCOPE_NAME
    version = parts[1] if len(parts) > 1 else ""
    return name, version


def _has_operation_id(raw: Mapping[str, Any]) -> bool:
    return any(raw.get(key) for key in OPERATION_ID_KEYS)


class TelemetryBatchConverter:
    """Convert an Application Insights export document into OTLP.

    Instances are stateless between calls; every call builds a fresh
    ExportTraceServiceRequest.
    """

    def convert(self, document: Document) -> ExportTraceServiceRequest:
        """Convert a document to an ExportTraceServiceRequest (all-or-nothing)."""
        return self.run(document).request

    def run(self, document: Document) -> MappingContext:
        """Convert a document and return the request together with counters."""
        records = load_records(document)
        logger.debug("Converting %d telemetry record(s)", len(records))
        ctx = MappingContext.create()
        for index, raw in enumerate(records):
            if not isinstance(raw, Mapping):
                raise MalformedDocumentError(
                    f"record {index} must be an object, got {type(raw).__name__}"
                )
            self._map_record(index, raw, ctx)
        logger.debug(
            "Converted %d record(s): skipped=%d partial=%d",
            ctx.converted,
            ctx.skipped,
            ctx.partial,
        )
        return ctx

    def _map_record(self, index: int, raw: Mapping[str, Any], ctx: MappingContext) -> None:
        if not _has_operation_id(raw):
            logger.warning(
                "Skip processing telemetry record %d! Property 'operationId' is missing", index
            )
            ctx.skipped += 1
            return
        record = TelemetryRecord.model_validate(raw)
        trace_id = record.value("operation_id")
        parent_id = record.value("parent_id")
        if parent_id == trace_id:
            parent_id = ""

        ctx.resource_spans.resource.CopyFrom(
            Resource(attributes=extract_resource_attributes(record))
        )
        scope_name, scope_version = parse_sdk_version(record.value("sdk_version"))

        logger.debug("Record %d: decoding trace id %s", index, trace_id)
        span = Span(trace_id=hex_to_bytes(trace_id))
        logger.debug("Record %d: decoding span id", index)
        span.span_id = hex_to_bytes(record.value("id"))
        if len(span.trace_id) != TRACE_ID_BYTES or len(span.span_id) != SPAN_ID_BYTES:
            logger.debug(
                "Record %d: unexpected id length trace=%d span=%d bytes (expected %d and %d)",
                index,
                len(span.trace_id),
                len(span.span_id),
                TRACE_ID_BYTES,
                SPAN_ID_BYTES,
            )
        if parent_id:
            logger.debug("Record %d: decoding parent span id %s", index, parent_id)
            span.parent_span_id = hex_to_bytes(parent_id)

        telemetry_type = record.value("type")
        if telemetry_type in DEPENDENCY_TYPES:
            # `name` is read inside extraction only
            name = record.value("operation_name")
            extraction = extract_dependency(record)
            span.kind = classify_span_kind(telemetry_type, extraction.dependency_type)
            if extraction.name is not None:
                name = extraction.name
            span.attributes.extend(extraction.attributes)
            if not extraction.ok:
                ctx.partial += 1
                logger.error(
                    "Error parsing telemetry of type '%s' (record %d, dependencyType=%r)",
                    telemetry_type,
                    index,
                    extraction.dependency_type,
                    exc_info=extraction.error,
                )
        else:
            name = record.value("operation_name") or record.value("name")
            span.kind = classify_span_kind(telemetry_type, "")
        span.name = name

        if record.duration_ms is None:
            raise MissingFieldError(f"record {index}: property 'durationMs' is missing")
        timestamp = record.value("time")
        span.start_time_unix_nano = to_epoch_nanos(timestamp)
        span.end_time_unix_nano = to_epoch_nanos_plus_duration(timestamp, record.duration_ms)

        for key, value in (record.properties or {}).items():
            mapped = map_property(key, value)
            if mapped is not None:
                span.attributes.extend([string_attribute(mapped.key, mapped.value)])

        scope_spans = ctx.resource_spans.scope_spans.add(
            scope=InstrumentationScope(name=scope_name, version=scope_version)
        )
        scope_spans.spans.extend([span])
        ctx.converted += 1
