"""Error taxonomy for sensor sessions.

Every transport-level failure ends the session; none of these are retried.
An out-of-range reading is not an error (see ``ReadingStatus``).
"""
from __future__ import annotations

from typing import Optional, Sequence


class AirSensorError(RuntimeError):
    """Base class for all fatal sensor session errors."""
    pass


class DeviceNotFoundError(AirSensorError):
    """Raised when no attached device matches the selector."""

    def __init__(self, selector, reason: Optional[str] = None):
        message = f"No device found for {selector}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.selector = selector


class MultipleDevicesError(AirSensorError):
    """Raised when several devices match and a unique match was required."""

    def __init__(self, selector, devices: Sequence):
        super().__init__(
            f"Multiple devices found for {selector} ({len(devices)} devices)"
        )
        self.selector = selector
        self.devices = list(devices)


class EndpointOpenError(AirSensorError):
    """Raised when claiming the interface or opening an endpoint fails.

    Attributes:
        direction: Direction of the endpoint, or None for the interface claim
        address: Endpoint address (or interface number for the claim)
    """

    def __init__(self, direction, address: int, reason: Optional[str] = None):
        what = (
            f"{direction.value.upper()} endpoint 0x{address:02x}"
            if direction is not None
            else f"interface {address}"
        )
        message = f"Failed to open {what}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.direction = direction
        self.address = address


class WriteIncompleteError(AirSensorError):
    """Raised when fewer bytes than the command frame were written."""

    def __init__(self, written: int, expected: int, reason: Optional[str] = None):
        message = f"Failed to write request command: {written} of {expected} bytes"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.written = written
        self.expected = expected


class ReadFailedError(AirSensorError):
    """Raised when any read of the exchange fails.

    Attributes:
        step: 'stale-flush', 'response' or 'trailing-flush'
    """

    def __init__(self, step: str, reason: Optional[str] = None):
        message = f"Failed to read ({step})"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.step = step


class SessionStateError(AirSensorError):
    """Raised when a session operation is called from the wrong state."""
    pass
