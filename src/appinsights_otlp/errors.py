"""Exception hierarchy for the conversion pipeline.

Only dependency attribute extraction is recoverable (handled inside the
orchestrator). Every exception defined here that escapes a conversion call
aborts the whole batch.
"""
from __future__ import annotations

__all__ = [
    "ConversionError",
    "MalformedDocumentError",
    "MalformedIdentifierError",
    "MalformedTimestampError",
    "MissingFieldError",
    "FieldTypeError",
    "ExportError",
]


class ConversionError(Exception):
    """Base class for all errors raised by appinsights-otlp."""


class MalformedDocumentError(ConversionError, ValueError):
    """Input document is not valid JSON or lacks a `records` array."""


class MalformedIdentifierError(ConversionError, ValueError):
    """Trace or span identifier is not an even-length hexadecimal string."""


class MalformedTimestampError(ConversionError, ValueError):
    """Timestamp is not an ISO-8601 date-time."""


class MissingFieldError(ConversionError, KeyError):
    """A field required outside the recoverable boundary is absent."""

    def __str__(self) -> str:  # KeyError quotes its message otherwise
        return str(self.args[0]) if self.args else ""


class FieldTypeError(ConversionError, TypeError):
    """A record field holds a JSON value of the wrong type."""


class ExportError(ConversionError):
    """OTLP/HTTP endpoint rejected the request or could not be reached."""
