"""Wire format of the VOC sensor exchange.

Pure functions with no side effects: the fixed request frame, 16-bit
little-endian decoding and the plausibility classification.
"""
from __future__ import annotations

import struct
from typing import Optional

from ..models import ReadingStatus, VOCReading

# "@h*TR\n" padded with '@' to a full 16-byte frame
COMMAND_FRAME = b"\x40\x68\x2a\x54\x52\x0a" + b"\x40" * 10

VALUE_OFFSET = 2
VALUE_SIZE = 2

# Sensor datasheet: anything outside this envelope is garbage
VOC_MIN = 450
VOC_MAX = 2000

_INT16_LE = struct.Struct("<h")


def decode_le_int16(data: bytes) -> int:
    """Interpret exactly two bytes as a little-endian signed 16-bit integer.

    Examples:
        >>> decode_le_int16(b"\\xc2\\x06")
        1730
        >>> decode_le_int16(b"\\xff\\xff")
        -1
    """
    if len(data) != VALUE_SIZE:
        raise ValueError(f"Expected {VALUE_SIZE} bytes, got {len(data)}")
    return _INT16_LE.unpack(data)[0]


def classify(value: int, raw_response: Optional[bytes] = None) -> VOCReading:
    """Tag a decoded value as VALID or OUT_OF_RANGE (both ends inclusive)."""
    status = (
        ReadingStatus.VALID
        if VOC_MIN <= value <= VOC_MAX
        else ReadingStatus.OUT_OF_RANGE
    )
    return VOCReading(value=value, status=status, raw_response=raw_response)


def decode_response(response: bytes) -> VOCReading:
    """Decode and classify the value carried at offset 2..4 of a response.

    Raises:
        ValueError: If the response is too short to carry a value.
    """
    end = VALUE_OFFSET + VALUE_SIZE
    if len(response) < end:
        raise ValueError(f"Response too short: {len(response)} bytes")
    value = decode_le_int16(bytes(response[VALUE_OFFSET:end]))
    return classify(value, raw_response=bytes(response))
