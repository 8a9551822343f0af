"""Sensor layer: device discovery and the request/response session."""

from .finder import find_devices, find_single_device
from .session import SensorSession, read_voc

__all__ = [
    "SensorSession",
    "read_voc",
    "find_devices",
    "find_single_device",
]
