"""Shipper: renders or sends a converted ExportTraceServiceRequest.

Two outputs are supported:

- OTLP/JSON (dry run), following the OTLP/JSON encoding rules: camelCase
  field names, integer enums, and trace/span ids as lower-case hex rather
  than protobuf JSON's base64.
- OTLP/HTTP protobuf POST to ``<endpoint>/v1/traces``. Transport errors are
  retried with exponential backoff; an HTTP error status is not retried.

Retrying lives here, in the process layer. The conversion never retries.
"""
from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional

import httpx
from google.protobuf.json_format import MessageToDict
from opentelemetry.proto.collector.trace.v1.trace_service_pb2 import (
    ExportTraceServiceRequest,
)
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import Settings
from .errors import ExportError
from .mapping.id_utils import bytes_to_hex

logger = logging.getLogger(__name__)

__all__ = ["PROTOBUF_CONTENT_TYPE", "request_to_otlp_json", "export_request", "span_count"]

PROTOBUF_CONTENT_TYPE = "application/x-protobuf"
_ID_FIELDS = ("traceId", "spanId", "parentSpanId")
_RETRY_WAIT = wait_exponential(multiplier=0.5, min=0.5, max=5)


def span_count(request: ExportTraceServiceRequest) -> int:
    return sum(
        len(scope_spans.spans)
        for resource_spans in request.resource_spans
        for scope_spans in resource_spans.scope_spans
    )


def _b64_to_hex(value: str) -> str:
    return bytes_to_hex(base64.b64decode(value))


def request_to_otlp_json(request: ExportTraceServiceRequest) -> Dict[str, Any]:
    """Return the OTLP/JSON representation of an export request."""
    payload = MessageToDict(request, use_integers_for_enums=True)
    for resource_spans in payload.get("resourceSpans", []):
        for scope_spans in resource_spans.get("scopeSpans", []):
            for span in scope_spans.get("spans", []):
                for id_field in _ID_FIELDS:
                    if id_field in span:
                        span[id_field] = _b64_to_hex(span[id_field])
    return payload


def export_request(
    request: ExportTraceServiceRequest,
    settings: Settings,
    *,
    client: Optional[httpx.Client] = None,
) -> httpx.Response:
    """POST a serialized request to the configured OTLP/HTTP traces endpoint.

    Args:
        request: Converted export request
        settings: Provides endpoint, headers, timeout and attempt count
        client: Optional httpx client (tests inject a mock transport)

    Returns:
        The successful httpx response

    Raises:
        ExportError: no endpoint configured, transport failure after all
            attempts, or HTTP status >= 400
    """
    endpoint = settings.OTEL_EXPORTER_OTLP_ENDPOINT
    if not endpoint:
        raise ExportError("OTEL_EXPORTER_OTLP_ENDPOINT is not configured")
    headers = {"Content-Type": PROTOBUF_CONTENT_TYPE, **settings.otlp_headers()}
    body = request.SerializeToString()
    own_client = client is None
    http = client or httpx.Client(timeout=settings.OTEL_EXPORTER_OTLP_TIMEOUT)
    retrying = Retrying(
        stop=stop_after_attempt(settings.EXPORT_MAX_ATTEMPTS),
        wait=_RETRY_WAIT,
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    try:
        for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "Retrying OTLP export to %s (attempt %d)",
                        endpoint,
                        attempt.retry_state.attempt_number,
                    )
                resp = http.post(endpoint, content=body, headers=headers)
    except httpx.TransportError as e:
        raise ExportError(f"OTLP export request failed: {e}") from e
    finally:
        if own_client:
            http.close()
    if resp.status_code >= 400:
        raise ExportError(
            f"OTLP export failed status={resp.status_code} body={resp.text[:500]}"
        )
    logger.info(
        "Exported %d span(s) to %s status=%d", span_count(request), endpoint, resp.status_code
    )
    return resp
