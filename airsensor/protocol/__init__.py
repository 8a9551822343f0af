"""Protocol layer: request frame and response decoding."""

from .codec import (
    COMMAND_FRAME,
    VOC_MAX,
    VOC_MIN,
    classify,
    decode_le_int16,
    decode_response,
)

__all__ = [
    "COMMAND_FRAME",
    "VOC_MAX",
    "VOC_MIN",
    "classify",
    "decode_le_int16",
    "decode_response",
]
