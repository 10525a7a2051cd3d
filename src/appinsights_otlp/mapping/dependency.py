"""Dependency-specific span name and attribute extraction.

Dispatches on the record's ``dependencyType``:

    HTTP / Http (tracked component)
        name ``"<METHOD> <path>"`` split on the first space; span name
        ``"HTTP <METHOD>"``; http.method, http.target (path), http.url (data),
        http.status_code (resultCode)
    Backend (API Management)
        method from ``name``; http.target from ``target``; http.method,
        http.target, http.status_code
    anything else
        span name is the dependency type; raw name, url, data, status and
        resultCode under the ``applicationinsights`` namespace

Every type then gets ``applicationinsights.dependency_type`` appended after
its own attributes, also when extraction failed part way.

Extraction never raises. A failure is returned on the result together with
whatever name and attributes were set before it, so the span can still be
emitted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from opentelemetry.proto.common.v1.common_pb2 import KeyValue

from ..models.appinsights import TelemetryRecord
from .attributes import try_add_attribute
from .semconv import (
    AI_DATA,
    AI_DEPENDENCY_TYPE,
    AI_NAME,
    AI_RESULT_CODE,
    AI_STATUS,
    AI_URL,
    ATTR_HTTP_METHOD,
    ATTR_HTTP_STATUS_CODE,
    ATTR_HTTP_TARGET,
    ATTR_HTTP_URL,
    DEPENDENCY_BACKEND,
    DEPENDENCY_HTTP,
    DEPENDENCY_HTTP_TRACKED,
)

__all__ = ["DependencyExtraction", "extract_dependency"]


@dataclass
class DependencyExtraction:
    """Outcome of dependency extraction: partial results plus optional error."""

    dependency_type: str
    name: Optional[str] = None
    attributes: List[KeyValue] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _request_line(record: TelemetryRecord) -> List[str]:
    return record.value("name").split(" ", 1)


def _extract_http(record: TelemetryRecord, result: DependencyExtraction) -> None:
    request = _request_line(record)
    method = request[0]
    result.name = f"HTTP {method}"
    try_add_attribute(result.attributes, ATTR_HTTP_METHOD, method)
    if len(request) < 2:
        raise ValueError(
            f"HTTP dependency name {record.value('name')!r} is not '<method> <path>'"
        )
    try_add_attribute(result.attributes, ATTR_HTTP_TARGET, request[1])
    try_add_attribute(result.attributes, ATTR_HTTP_URL, record.value("data"))
    try_add_attribute(result.attributes, ATTR_HTTP_STATUS_CODE, record.value("result_code"))


def _extract_backend(record: TelemetryRecord, result: DependencyExtraction) -> None:
    method = _request_line(record)[0]
    result.name = f"HTTP {method}"
    try_add_attribute(result.attributes, ATTR_HTTP_METHOD, method)
    try_add_attribute(result.attributes, ATTR_HTTP_TARGET, record.value("target"))
    try_add_attribute(result.attributes, ATTR_HTTP_STATUS_CODE, record.value("result_code"))


def _extract_generic(record: TelemetryRecord, result: DependencyExtraction) -> None:
    result.name = result.dependency_type
    try_add_attribute(result.attributes, AI_NAME, record.value("name"))
    try_add_attribute(result.attributes, AI_URL, record.value("url"))
    try_add_attribute(result.attributes, AI_DATA, record.value("data"))
    try_add_attribute(result.attributes, AI_STATUS, record.value("status"))
    try_add_attribute(result.attributes, AI_RESULT_CODE, record.value("result_code"))


_EXTRACTORS: Dict[str, Callable[[TelemetryRecord, DependencyExtraction], None]] = {
    DEPENDENCY_HTTP: _extract_http,
    DEPENDENCY_HTTP_TRACKED: _extract_http,
    DEPENDENCY_BACKEND: _extract_backend,
}


def extract_dependency(record: TelemetryRecord) -> DependencyExtraction:
    """Extract span name and attributes for a dependency record.

    Args:
        record: Validated telemetry record of a dependency type

    Returns:
        DependencyExtraction; ``name`` stays None when the failure happened
        before a name could be derived
    """
    result = DependencyExtraction(dependency_type="")
    try:
        result.dependency_type = record.value("dependency_type")
        extractor = _EXTRACTORS.get(result.dependency_type, _extract_generic)
        extractor(record, result)
    except Exception as e:
        result.error = e
    try_add_attribute(result.attributes, AI_DEPENDENCY_TYPE, result.dependency_type)
    return result
