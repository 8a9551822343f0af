"""Immutable data models for the air sensor session.

All models are frozen dataclasses so a configuration or reading can be
handed between layers without copying.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Atmel VID/PID reported by the iAQ-stick family (e.g. Voltcraft CO-20)
DEFAULT_VENDOR_ID = 0x03EB
DEFAULT_PRODUCT_ID = 0x2013

ENDPOINT_DIR_IN = 0x80
ENDPOINT_DIR_OUT = 0x00


class Direction(Enum):
    """Endpoint transfer direction."""
    IN = "in"
    OUT = "out"

    @property
    def flag(self) -> int:
        """Direction bit OR-ed into the endpoint address."""
        return ENDPOINT_DIR_IN if self is Direction.IN else ENDPOINT_DIR_OUT


class ReadingStatus(Enum):
    """Classification of a decoded sensor value."""
    VALID = "valid"
    OUT_OF_RANGE = "out_of_range"


class SessionState(Enum):
    """Lifecycle of a SensorSession. No state is re-entered."""
    UNOPENED = "unopened"
    OPENED = "opened"
    FLUSHED = "flushed"
    REQUESTED = "requested"
    DECODED = "decoded"
    CLOSED = "closed"
    FAILED = "failed"


@dataclass(frozen=True)
class DeviceSelector:
    """USB vendor/product identifier pair used to locate the sensor.

    Attributes:
        vendor_id: USB Vendor ID
        product_id: USB Product ID
    """
    vendor_id: int = DEFAULT_VENDOR_ID
    product_id: int = DEFAULT_PRODUCT_ID

    def __post_init__(self) -> None:
        for name in ("vendor_id", "product_id"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFFFF:
                raise ValueError(f"{name} out of range: {value!r}")

    @classmethod
    def parse(cls, text: str) -> DeviceSelector:
        """Parse a ``vvvv:pppp`` hex string such as ``03eb:2013``.

        Raises:
            ValueError: If the string is not two colon-separated hex numbers.
        """
        parts = text.strip().split(":")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"Expected vendor:product, got {text!r}")
        try:
            vendor, product = (int(p, 16) for p in parts)
        except ValueError:
            raise ValueError(f"Invalid hex in device selector {text!r}") from None
        return cls(vendor_id=vendor, product_id=product)

    def __str__(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x}"


@dataclass(frozen=True)
class SensorConfig:
    """Everything a session needs to reach the sensor.

    Attributes:
        selector: Which vendor/product pair to open
        configuration: USB configuration value
        interface: Interface number to claim
        alt_setting: Alternate setting of the interface
        endpoint: IN endpoint number the response is read from
        write_endpoint: OUT endpoint number the command is written to
        debug: Transport debug verbosity (0 = silent .. 4 = everything)
        read_size: Buffer size for the response read
        stale_flush_size: Buffer size for the flush before the command;
            0 issues a zero-length read
        flush_size: Buffer size for the flush after the response
        timeout_ms: Transfer timeout; None uses the adapter default,
            0 blocks indefinitely
        require_unique: Refuse to pick when several devices match
    """
    selector: DeviceSelector = field(default_factory=DeviceSelector)
    configuration: int = 1
    interface: int = 0
    alt_setting: int = 0
    endpoint: int = 1
    write_endpoint: int = 2
    debug: int = 3
    read_size: int = 16
    stale_flush_size: int = 0
    flush_size: int = 16
    timeout_ms: Optional[int] = None
    require_unique: bool = False

    def __post_init__(self) -> None:
        for name in ("endpoint", "write_endpoint"):
            value = getattr(self, name)
            if not 0 < value < 16:
                raise ValueError(f"{name} must be 1..15, got {value!r}")
        if self.read_size < 4:
            raise ValueError("read_size must hold at least 4 bytes")
        if self.stale_flush_size < 0 or self.flush_size < 0:
            raise ValueError("flush sizes must be non-negative")
        if self.timeout_ms is not None and self.timeout_ms < 0:
            raise ValueError("timeout_ms must be non-negative")

    @property
    def read_address(self) -> int:
        return self.endpoint | Direction.IN.flag

    @property
    def write_address(self) -> int:
        return self.write_endpoint | Direction.OUT.flag


@dataclass(frozen=True)
class VOCReading:
    """One decoded sensor value and its classification.

    Attributes:
        value: Raw signed 16-bit value from the response
        status: VALID when within the plausible envelope
        raw_response: Full response bytes, kept for diagnostics
    """
    value: int
    status: ReadingStatus
    raw_response: Optional[bytes] = None

    @property
    def is_valid(self) -> bool:
        return self.status is ReadingStatus.VALID

    def describe(self) -> str:
        """Human-readable report line."""
        if self.is_valid:
            return f"VOC concentration: {self.value} ppm CO2-equivalent"
        return f"ERROR: invalid value {self.value} received"
