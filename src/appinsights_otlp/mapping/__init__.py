"""Internal mapping subpackage for the record-to-span transformation.

All functions within this package are pure (no network I/O) and
deterministic. The public API lives in the top-level `converter.py` facade;
callers should not import directly from this package unless accessing
helpers for testing purposes.

Modules:
    orchestrator: Batch pipeline producing the ExportTraceServiceRequest
    dependency: HTTP / Backend / generic dependency attribute extraction
    properties: Custom property denylist and key normalization
    resource: Resource attribute extraction
    span_kind: Span kind classification
    id_utils: Hex identifier decoding
    time_utils: ISO-8601 to epoch nanosecond conversion
    attributes: OTLP string attribute helpers
    semconv: Attribute keys and vendor constants
    mapping_context: Per-call state container

Design Invariants:
    - No network calls permitted
    - One span and one ScopeSpans per converted record
    - Exactly one ResourceSpans per call
    - Only dependency extraction failures are recoverable
"""
from __future__ import annotations

from . import id_utils as id_utils  # noqa: F401
from . import time_utils as time_utils  # noqa: F401

__all__ = ["time_utils", "id_utils"]
