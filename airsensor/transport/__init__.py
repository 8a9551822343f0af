"""Transport layer for USB sensor communication."""

from .base import DeviceHandle, Endpoint, TransportError, UsbAdapter
from .pyusb import PyUsbAdapter

__all__ = ["DeviceHandle", "Endpoint", "TransportError", "UsbAdapter", "PyUsbAdapter"]
