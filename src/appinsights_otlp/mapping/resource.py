"""Resource attribute extraction from role, instance, process and host fields."""
from __future__ import annotations

from typing import List

from opentelemetry.proto.common.v1.common_pb2 import KeyValue

from ..models.appinsights import TelemetryRecord
from .attributes import try_add_attribute
from .semconv import (
    ATTR_HOST_ID,
    ATTR_PROCESS_PID,
    ATTR_SERVICE_INSTANCE_ID,
    ATTR_SERVICE_NAME,
    PROPERTY_HOST_INSTANCE_ID,
    PROPERTY_PROCESS_ID,
)

__all__ = ["extract_resource_attributes"]


def extract_resource_attributes(record: TelemetryRecord) -> List[KeyValue]:
    """Build resource attributes for a record, skipping empty sources.

    Order: service.name, service.instance.id, process.pid, host.id. The last
    two are only consulted when the record has a ``properties`` object.
    """
    attributes: List[KeyValue] = []
    try_add_attribute(attributes, ATTR_SERVICE_NAME, record.value("app_role_name"))
    try_add_attribute(attributes, ATTR_SERVICE_INSTANCE_ID, record.value("app_role_instance"))
    if record.has_properties:
        try_add_attribute(attributes, ATTR_PROCESS_PID, record.property_value(PROPERTY_PROCESS_ID))
        try_add_attribute(attributes, ATTR_HOST_ID, record.property_value(PROPERTY_HOST_INSTANCE_ID))
    return attributes
