"""Package initialization for appinsights-otlp.

Converts Azure Application Insights telemetry exports into OpenTelemetry OTLP
trace export requests. The public entry point is
`appinsights_otlp.converter.convert_document`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
