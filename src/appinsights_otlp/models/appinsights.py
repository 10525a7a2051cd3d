"""Pydantic model for one Application Insights telemetry export record.

Field names follow the camelCase export schema. The PascalCase names written
by Azure diagnostic settings (``OperationId``, ``DurationMs``, ...) are
accepted as aliases so both export flavours validate into the same model.
JSON ``null`` and absent fields both read as ``None``; `TelemetryRecord.value`
folds them to the empty string the mapping code works with.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..errors import FieldTypeError

logger = logging.getLogger(__name__)

__all__ = ["TelemetryRecord", "OPERATION_ID_KEYS"]

# Keys checked on the raw mapping before the record is validated
OPERATION_ID_KEYS = ("operationId", "OperationId", "operation_id")


def _field(*aliases: str):
    return Field(default=None, validation_alias=AliasChoices(*aliases))


class TelemetryRecord(BaseModel):
    """One request or dependency telemetry item."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    operation_id: Optional[str] = _field("operationId", "OperationId", "operation_id")
    parent_id: Optional[str] = _field("parentId", "ParentId", "parent_id")
    id: Optional[str] = _field("id", "Id")
    type: Optional[str] = _field("type", "Type")
    name: Optional[Any] = _field("name", "Name")
    operation_name: Optional[str] = _field("operationName", "OperationName", "operation_name")
    time: Optional[str] = _field("time", "Time", "TimeGenerated")
    duration_ms: Optional[float] = _field("durationMs", "DurationMs", "duration_ms")
    app_role_name: Optional[str] = _field("appRoleName", "AppRoleName", "app_role_name")
    app_role_instance: Optional[str] = _field(
        "appRoleInstance", "AppRoleInstance", "app_role_instance"
    )
    sdk_version: Optional[str] = _field("sdkVersion", "SDKVersion", "SdkVersion", "sdk_version")
    # Untyped fields are type-checked by `value()` when read. Apart from `name`
    # they are only read inside dependency extraction.
    dependency_type: Optional[Any] = _field(
        "dependencyType", "DependencyType", "dependency_type"
    )
    data: Optional[Any] = _field("data", "Data")
    url: Optional[Any] = _field("url", "Url")
    target: Optional[Any] = _field("target", "Target")
    result_code: Optional[Any] = _field("resultCode", "ResultCode", "result_code")
    status: Optional[Any] = _field("status", "Status")
    properties: Optional[Dict[str, Optional[str]]] = _field("properties", "Properties")

    def value(self, field_name: str) -> str:
        """Return a string field, or "" when it is absent, null or empty.

        Absent fields are traced at DEBUG level.

        Raises:
            FieldTypeError: the field holds a non-string JSON value
        """
        if field_name not in self.model_fields_set:
            logger.debug("Missing property '%s'", field_name)
        raw = getattr(self, field_name)
        if raw is None:
            return ""
        if not isinstance(raw, str):
            raise FieldTypeError(
                f"property '{field_name}' should be a string, got {type(raw).__name__}"
            )
        return raw

    @property
    def has_properties(self) -> bool:
        return self.properties is not None

    def property_value(self, key: str) -> str:
        """Return a custom property, or "" when absent, null or empty."""
        props = self.properties or {}
        if key not in props:
            logger.debug("Missing property '%s'", key)
        return props.get(key) or ""
