"""Hexadecimal trace and span identifier codec.

Application Insights carries W3C identifiers as lower-case hex strings:
32 characters for an operation (trace) id and 16 characters for a span id.
OTLP wants the raw bytes.

Public Functions:
    hex_to_bytes: Decode hex string to bytes, two characters per byte
    bytes_to_hex: Encode bytes as lower-case hex (OTLP/JSON rendering)

Design Invariant:
    No length is enforced here. Trace ids are expected to decode to
    TRACE_ID_BYTES and span ids to SPAN_ID_BYTES; the orchestrator reports
    other lengths at DEBUG level. Malformed input (odd
    length, non-hex characters) is fatal for the batch.
"""
from __future__ import annotations

import binascii

from ..errors import MalformedIdentifierError

__all__ = ["TRACE_ID_BYTES", "SPAN_ID_BYTES", "hex_to_bytes", "bytes_to_hex"]

TRACE_ID_BYTES = 16
SPAN_ID_BYTES = 8


def hex_to_bytes(value: str) -> bytes:
    """Decode a hex string, most significant nibble first.

    Args:
        value: Even-length string of hexadecimal digits (either case)

    Returns:
        Decoded bytes, ``len(value) // 2`` long

    Raises:
        MalformedIdentifierError: value has odd length or non-hex characters
    """
    try:
        return binascii.unhexlify(value)
    except (binascii.Error, TypeError, ValueError) as e:
        raise MalformedIdentifierError(f"invalid hex identifier {value!r}: {e}") from e


def bytes_to_hex(value: bytes) -> str:
    return binascii.hexlify(value).decode("ascii")
