"""Attribute keys and vendor constants shared by the mapping modules.

OpenTelemetry keys follow the (pre-1.21) HTTP and resource semantic
conventions used by the Azure Monitor exporter mapping. Application Insights
keys live under the `applicationinsights` namespace.

Record field names are declared on the pydantic model in
`appinsights_otlp.models.appinsights`.
"""
from __future__ import annotations

__all__ = [
    "ATTR_SERVICE_NAME",
    "ATTR_SERVICE_INSTANCE_ID",
    "ATTR_PROCESS_PID",
    "ATTR_HOST_ID",
    "ATTR_HTTP_METHOD",
    "ATTR_HTTP_TARGET",
    "ATTR_HTTP_URL",
    "ATTR_HTTP_STATUS_CODE",
    "AI_NAMESPACE",
    "AI_PROPERTIES_PREFIX",
    "AI_NAME",
    "AI_URL",
    "AI_DATA",
    "AI_STATUS",
    "AI_RESULT_CODE",
    "AI_DEPENDENCY_TYPE",
    "DEFAULT_SCOPE_NAME",
    "REQUEST_TYPES",
    "DEPENDENCY_TYPES",
    "MESSAGING_PREFIX",
    "DEPENDENCY_HTTP",
    "DEPENDENCY_HTTP_TRACKED",
    "DEPENDENCY_BACKEND",
    "PROPERTY_HOST_INSTANCE_ID",
    "PROPERTY_PROCESS_ID",
    "PROPERTY_OPERATION_NAME",
    "PROPERTY_LOG_LEVEL",
    "PROPERTY_CATEGORY",
]

# Resource attributes
ATTR_SERVICE_NAME = "service.name"
ATTR_SERVICE_INSTANCE_ID = "service.instance.id"
ATTR_PROCESS_PID = "process.pid"
ATTR_HOST_ID = "host.id"

# HTTP span attributes
ATTR_HTTP_METHOD = "http.method"
ATTR_HTTP_TARGET = "http.target"
ATTR_HTTP_URL = "http.url"
ATTR_HTTP_STATUS_CODE = "http.status_code"

# Application Insights specific span attributes
AI_NAMESPACE = "applicationinsights"
AI_PROPERTIES_PREFIX = f"{AI_NAMESPACE}.properties."
AI_NAME = f"{AI_NAMESPACE}.name"
AI_URL = f"{AI_NAMESPACE}.url"
AI_DATA = f"{AI_NAMESPACE}.data"
AI_STATUS = f"{AI_NAMESPACE}.status"
AI_RESULT_CODE = f"{AI_NAMESPACE}.result_code"
AI_DEPENDENCY_TYPE = f"{AI_NAMESPACE}.dependency_type"

# Scope name used when a record carries no sdkVersion
DEFAULT_SCOPE_NAME = AI_NAMESPACE

# Telemetry types. The short names come from the Logic Apps / Event Hub
# export; the App* spelling from workspace-based diagnostic settings.
REQUEST_TYPES = frozenset({"Requests", "AppRequests"})
DEPENDENCY_TYPES = frozenset({"Dependencies", "AppDependencies"})

# Lower-cased prefix of messaging dependency types ("Queue Message | Azure Service Bus")
MESSAGING_PREFIX = "queue message"

# Dependency types with dedicated extraction
DEPENDENCY_HTTP = "HTTP"
# Call tracked by another Application Insights instance
DEPENDENCY_HTTP_TRACKED = "Http (tracked component)"
# API Management gateway backend call
DEPENDENCY_BACKEND = "Backend"

# Custom property keys with special handling
PROPERTY_HOST_INSTANCE_ID = "HostInstanceId"
PROPERTY_PROCESS_ID = "ProcessId"
PROPERTY_OPERATION_NAME = "OperationName"
PROPERTY_LOG_LEVEL = "LogLevel"
PROPERTY_CATEGORY = "Category"
