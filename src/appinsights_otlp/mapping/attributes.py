"""Helpers for building OTLP string attributes."""
from __future__ import annotations

from typing import List

from opentelemetry.proto.common.v1.common_pb2 import AnyValue, KeyValue

__all__ = ["string_attribute", "try_add_attribute"]


def string_attribute(key: str, value: str) -> KeyValue:
    return KeyValue(key=key, value=AnyValue(string_value=value))


def try_add_attribute(attributes: List[KeyValue], key: str, value: str) -> bool:
    """Append ``key=value`` unless value is empty. Returns True when appended."""
    if not value:
        return False
    attributes.append(string_attribute(key, value))
    return True
