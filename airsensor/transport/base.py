"""Abstract USB transport contract consumed by the sensor session.

The session never talks to a USB library directly. It needs only:
- device discovery by vendor/product pair
- interface claiming that hands back a release function
- endpoint opening by (config, interface, alt setting, address)
- blocking byte reads and writes on those endpoints

Implementations report I/O problems by raising TransportError so the
session can map them onto its own error taxonomy.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, List

from ..models import DeviceSelector


class TransportError(IOError):
    """Raised by adapters for any transport-level failure."""
    pass


class Endpoint(ABC):
    """One opened bulk endpoint.

    An endpoint is either read-capable (IN) or write-capable (OUT). Calling
    the wrong method raises TransportError.
    """

    @property
    @abstractmethod
    def address(self) -> int:
        """Endpoint address including the direction bit."""
        pass

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Block until the device returns up to ``size`` bytes.

        Returns:
            The bytes read (may be shorter than ``size``, or empty)
        """
        pass

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Block until ``data`` is sent.

        Returns:
            Number of bytes actually written
        """
        pass

    def close(self) -> None:
        """Release the endpoint handle. Safe to call more than once."""
        pass


class DeviceHandle(ABC):
    """An opened device returned by UsbAdapter.find_devices().

    Every handle returned by discovery must be closed by the caller.
    """

    @property
    @abstractmethod
    def selector(self) -> DeviceSelector:
        """Vendor/product pair reported by the device descriptor."""
        pass

    def describe(self) -> str:
        """Short descriptor summary for logs."""
        return str(self.selector)

    @abstractmethod
    def claim_interface(
        self,
        configuration: int,
        interface: int,
        alt_setting: int,
    ) -> Callable[[], None]:
        """Activate the configuration and claim the interface.

        Returns:
            Function that releases the claim
        """
        pass

    @abstractmethod
    def open_endpoint(
        self,
        configuration: int,
        interface: int,
        alt_setting: int,
        address: int,
    ) -> Endpoint:
        """Open an endpoint of a claimed interface.

        Args:
            address: Endpoint number OR-ed with the direction flag (0x80 = IN)
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the device handle. Safe to call more than once."""
        pass


class UsbAdapter(ABC):
    """Process-wide USB context.

    One adapter is opened at program start and closed at the end; sessions
    borrow it and never close it themselves.
    """

    @abstractmethod
    def find_devices(self, selector: DeviceSelector) -> List[DeviceHandle]:
        """Return a handle for every attached device matching ``selector``."""
        pass

    def set_debug(self, level: int) -> None:
        """Set transport debug verbosity (0 = silent .. 4 = everything)."""
        pass

    def close(self) -> None:
        """Tear down the context."""
        pass

    def __enter__(self) -> UsbAdapter:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
