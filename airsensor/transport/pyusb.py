"""PyUSB implementation of the USB transport contract.

Follows the usual libusb sequence:
1. Find devices by VID/PID
2. Detach a kernel driver if one is bound (Linux)
3. SetConfiguration / ClaimInterface / SetInterfaceAltSetting
4. Bulk read/write on the selected endpoints

Requires: ``pip install pyusb`` + a libusb-1.0 runtime.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

import usb.core
import usb.util

from ..models import DeviceSelector
from .base import DeviceHandle, Endpoint, TransportError, UsbAdapter

logger = logging.getLogger(__name__)

# libusb debug levels mapped onto the PyUSB logger
DEBUG_LEVELS = {
    0: logging.CRITICAL + 10,
    1: logging.ERROR,
    2: logging.WARNING,
    3: logging.INFO,
    4: logging.DEBUG,
}


class PyUsbEndpoint(Endpoint):
    """Bulk endpoint backed by a ``usb.core.Endpoint`` descriptor."""

    def __init__(self, endpoint, timeout_ms: Optional[int] = None):
        self._endpoint = endpoint
        self._timeout = timeout_ms
        self._closed = False

    @property
    def address(self) -> int:
        return self._endpoint.bEndpointAddress

    @property
    def is_in(self) -> bool:
        return usb.util.endpoint_direction(self.address) == usb.util.ENDPOINT_IN

    def read(self, size: int) -> bytes:
        if self._closed:
            raise TransportError(f"Endpoint 0x{self.address:02x} is closed")
        if not self.is_in:
            raise TransportError(f"Endpoint 0x{self.address:02x} is not readable")
        try:
            return bytes(self._endpoint.read(size, timeout=self._timeout))
        except usb.core.USBError as e:
            raise TransportError(str(e)) from e

    def write(self, data: bytes) -> int:
        if self._closed:
            raise TransportError(f"Endpoint 0x{self.address:02x} is closed")
        if self.is_in:
            raise TransportError(f"Endpoint 0x{self.address:02x} is not writable")
        try:
            return self._endpoint.write(data, timeout=self._timeout)
        except usb.core.USBError as e:
            raise TransportError(str(e)) from e

    def close(self) -> None:
        self._closed = True


class PyUsbDevice(DeviceHandle):
    """Device handle wrapping a ``usb.core.Device``."""

    def __init__(self, device, timeout_ms: Optional[int] = None):
        self._device = device
        self._timeout = timeout_ms
        self._detached: List[int] = []

    @property
    def selector(self) -> DeviceSelector:
        return DeviceSelector(self._device.idVendor, self._device.idProduct)

    @property
    def device(self):
        return self._device

    def describe(self) -> str:
        return (
            f"{self.selector} bus {getattr(self._device, 'bus', '?')} "
            f"address {getattr(self._device, 'address', '?')}"
        )

    def claim_interface(
        self,
        configuration: int,
        interface: int,
        alt_setting: int,
    ) -> Callable[[], None]:
        if self._device is None:
            raise TransportError("Device is closed")

        self._detach_kernel_driver(interface)

        try:
            self._activate_configuration(configuration)
            usb.util.claim_interface(self._device, interface)
            if alt_setting:
                self._device.set_interface_altsetting(
                    interface=interface, alternate_setting=alt_setting
                )
        except usb.core.USBError as e:
            self._reattach_kernel_driver(interface)
            raise TransportError(str(e)) from e

        device = self._device

        def release() -> None:
            try:
                usb.util.release_interface(device, interface)
            except usb.core.USBError as e:
                raise TransportError(str(e)) from e
            self._reattach_kernel_driver(interface, device)

        return release

    def open_endpoint(
        self,
        configuration: int,
        interface: int,
        alt_setting: int,
        address: int,
    ) -> Endpoint:
        if self._device is None:
            raise TransportError("Device is closed")

        try:
            cfg = usb.util.find_descriptor(
                self._device, bConfigurationValue=configuration
            )
            if cfg is None:
                raise TransportError(f"No configuration {configuration}")
            intf = usb.util.find_descriptor(
                cfg, bInterfaceNumber=interface, bAlternateSetting=alt_setting
            )
            if intf is None:
                raise TransportError(
                    f"No interface {interface} alt setting {alt_setting}"
                )
            ep = usb.util.find_descriptor(intf, bEndpointAddress=address)
        except usb.core.USBError as e:
            raise TransportError(str(e)) from e

        if ep is None:
            raise TransportError(f"No endpoint 0x{address:02x} on interface {interface}")

        logger.debug("Opened endpoint 0x%02x", address)
        return PyUsbEndpoint(ep, timeout_ms=self._timeout)

    def close(self) -> None:
        if self._device is None:
            return
        for interface in list(self._detached):
            self._reattach_kernel_driver(interface)
        try:
            usb.util.dispose_resources(self._device)
        finally:
            self._device = None

    def _activate_configuration(self, configuration: int) -> None:
        try:
            active = self._device.get_active_configuration()
        except usb.core.USBError:
            active = None
        if active is None or active.bConfigurationValue != configuration:
            self._device.set_configuration(configuration)

    def _detach_kernel_driver(self, interface: int) -> None:
        try:
            if self._device.is_kernel_driver_active(interface):
                self._device.detach_kernel_driver(interface)
                self._detached.append(interface)
                logger.debug("Detached kernel driver from interface %d", interface)
        except (usb.core.USBError, NotImplementedError) as e:
            logger.debug("Kernel driver detach: %s", e)

    def _reattach_kernel_driver(self, interface: int, device=None) -> None:
        if interface not in self._detached:
            return
        self._detached.remove(interface)
        try:
            (device or self._device).attach_kernel_driver(interface)
        except (usb.core.USBError, NotImplementedError) as e:
            logger.debug("Kernel driver reattach: %s", e)


class PyUsbAdapter(UsbAdapter):
    """USB context backed by PyUSB.

    Args:
        backend: PyUSB backend, or None for PyUSB's default (libusb1)
        timeout_ms: Transfer timeout for every endpoint; None keeps PyUSB's
            default, 0 blocks indefinitely
    """

    def __init__(self, backend=None, timeout_ms: Optional[int] = None):
        self._backend = backend
        self._timeout = timeout_ms
        self._handles: List[PyUsbDevice] = []
        self._previous_level: Optional[int] = None

    def find_devices(self, selector: DeviceSelector) -> List[DeviceHandle]:
        try:
            found = usb.core.find(
                find_all=True,
                idVendor=selector.vendor_id,
                idProduct=selector.product_id,
                backend=self._backend,
            )
            devices = list(found) if found is not None else []
        except usb.core.NoBackendError as e:
            raise TransportError(f"No libusb backend available: {e}") from e
        except usb.core.USBError as e:
            raise TransportError(str(e)) from e

        handles = [PyUsbDevice(dev, timeout_ms=self._timeout) for dev in devices]
        self._handles.extend(handles)
        return handles

    def set_debug(self, level: int) -> None:
        usb_logger = logging.getLogger("usb")
        if self._previous_level is None:
            self._previous_level = usb_logger.level
        level = max(0, min(level, max(DEBUG_LEVELS)))
        usb_logger.setLevel(DEBUG_LEVELS[level])

    def close(self) -> None:
        for handle in self._handles:
            try:
                handle.close()
            except usb.core.USBError as e:
                logger.warning("Error disposing device: %s", e)
        self._handles.clear()
        if self._previous_level is not None:
            logging.getLogger("usb").setLevel(self._previous_level)
            self._previous_level = None
