"""Air sensor - read VOC concentration from a USB air quality stick."""

from .errors import (
    AirSensorError,
    DeviceNotFoundError,
    EndpointOpenError,
    MultipleDevicesError,
    ReadFailedError,
    SessionStateError,
    WriteIncompleteError,
)
from .models import (
    DeviceSelector,
    Direction,
    ReadingStatus,
    SensorConfig,
    SessionState,
    VOCReading,
)
from .protocol import COMMAND_FRAME, classify, decode_le_int16, decode_response
from .sensor import SensorSession, find_single_device, read_voc
from .transport import UsbAdapter

__all__ = [
    "AirSensorError",
    "DeviceNotFoundError",
    "EndpointOpenError",
    "MultipleDevicesError",
    "ReadFailedError",
    "SessionStateError",
    "WriteIncompleteError",
    "DeviceSelector",
    "Direction",
    "ReadingStatus",
    "SensorConfig",
    "SessionState",
    "VOCReading",
    "COMMAND_FRAME",
    "classify",
    "decode_le_int16",
    "decode_response",
    "SensorSession",
    "find_single_device",
    "read_voc",
    "UsbAdapter",
]
