"""One complete request/response interaction with the VOC sensor.

A session walks a fixed sequence:
    open -> stale-flush -> write command -> read response -> decode
    -> trailing-flush -> close

Every step blocks. Any failure ends the session (state FAILED) after the
write endpoint, read endpoint, interface claim and device handle have
been released, in that order. A session is single use.

Example:
    >>> from airsensor.transport import PyUsbAdapter
    >>> with PyUsbAdapter() as adapter:
    ...     reading = read_voc(adapter)
    ...     print(reading.describe())
"""
from __future__ import annotations

import contextlib
import logging
from typing import Callable, Iterator, Optional

from ..errors import (
    EndpointOpenError,
    ReadFailedError,
    SessionStateError,
    WriteIncompleteError,
)
from ..models import Direction, SensorConfig, SessionState, VOCReading
from ..protocol.codec import COMMAND_FRAME, decode_response
from ..transport.base import DeviceHandle, Endpoint, TransportError, UsbAdapter
from .finder import find_single_device

logger = logging.getLogger(__name__)

STEP_STALE_FLUSH = "stale-flush"
STEP_RESPONSE = "response"
STEP_TRAILING_FLUSH = "trailing-flush"

_TERMINAL_STATES = (SessionState.CLOSED, SessionState.FAILED)


class SensorSession:
    """Owns one device handle, its interface claim and two endpoints.

    Args:
        adapter: Process-wide USB context (not closed by the session)
        config: Device selector and endpoint layout, defaults if None
    """

    def __init__(self, adapter: UsbAdapter, config: Optional[SensorConfig] = None):
        self._adapter = adapter
        self._config = config or SensorConfig()
        self._state = SessionState.UNOPENED

        self._device: Optional[DeviceHandle] = None
        self._release_interface: Optional[Callable[[], None]] = None
        self._reader: Optional[Endpoint] = None
        self._writer: Optional[Endpoint] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> SensorConfig:
        return self._config

    def open(self) -> SensorSession:
        """Find the device, claim the interface and open both endpoints.

        Raises:
            DeviceNotFoundError: No device matches the selector.
            MultipleDevicesError: Several match and a unique one was required.
            EndpointOpenError: The claim or either endpoint could not be opened.
        """
        self._require(SessionState.UNOPENED, "open")
        cfg = self._config

        with self._fail_on_error():
            self._device = find_single_device(
                self._adapter, cfg.selector, require_unique=cfg.require_unique
            )

            try:
                self._release_interface = self._device.claim_interface(
                    cfg.configuration, cfg.interface, cfg.alt_setting
                )
            except TransportError as e:
                raise EndpointOpenError(None, cfg.interface, str(e)) from e

            logger.info("Connecting to endpoints of %s", self._device.describe())
            self._reader = self._open_endpoint(Direction.IN, cfg.read_address)
            logger.debug("Got read endpoint 0x%02x", cfg.read_address)
            self._writer = self._open_endpoint(Direction.OUT, cfg.write_address)
            logger.debug("Got write endpoint 0x%02x", cfg.write_address)

        self._state = SessionState.OPENED
        return self

    def flush(self) -> int:
        """Drain stale bytes left behind by an earlier transaction.

        Returns:
            Number of bytes discarded

        Raises:
            ReadFailedError: The read failed. The session is then FAILED.
        """
        self._require(SessionState.OPENED, "flush")
        with self._fail_on_error():
            count = self._drain(STEP_STALE_FLUSH, self._config.stale_flush_size)
        self._state = SessionState.FLUSHED
        return count

    def request_reading(self) -> VOCReading:
        """Run the full exchange and close the session.

        An out-of-range value is returned as a reading with status
        OUT_OF_RANGE; it does not raise.

        Raises:
            ReadFailedError: Any of the three reads failed.
            WriteIncompleteError: The command frame was not fully written.
        """
        if self._state is SessionState.OPENED:
            self.flush()
        self._require(SessionState.FLUSHED, "request_reading")

        with self._fail_on_error():
            self._send_command()
            self._state = SessionState.REQUESTED

            reading = self._receive_reading()
            self._state = SessionState.DECODED

            self._drain(STEP_TRAILING_FLUSH, self._config.flush_size)

        self.close()
        return reading

    def close(self) -> None:
        """Release all resources, newest first. Safe to call more than once."""
        if self._state in _TERMINAL_STATES:
            return
        self._release_all()
        self._state = SessionState.CLOSED

    def __enter__(self) -> SensorSession:
        if self._state is SessionState.UNOPENED:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # Internal methods

    def _open_endpoint(self, direction: Direction, address: int) -> Endpoint:
        cfg = self._config
        try:
            return self._device.open_endpoint(
                cfg.configuration, cfg.interface, cfg.alt_setting, address
            )
        except TransportError as e:
            raise EndpointOpenError(direction, address, str(e)) from e

    def _drain(self, step: str, size: int) -> int:
        try:
            data = self._reader.read(size)
        except TransportError as e:
            raise ReadFailedError(step, str(e)) from e
        logger.info("Read %d bytes into temporary buffer", len(data))
        return len(data)

    def _send_command(self) -> None:
        expected = len(COMMAND_FRAME)
        try:
            written = self._writer.write(COMMAND_FRAME)
        except TransportError as e:
            raise WriteIncompleteError(0, expected, str(e)) from e
        logger.debug("Request data - wrote %d bytes: %s", written, COMMAND_FRAME.hex(" "))
        if written < expected:
            raise WriteIncompleteError(written, expected)

    def _receive_reading(self) -> VOCReading:
        try:
            response = self._reader.read(self._config.read_size)
        except TransportError as e:
            raise ReadFailedError(STEP_RESPONSE, str(e)) from e
        logger.debug("Response data - read %d bytes: %s", len(response), response.hex(" "))

        try:
            reading = decode_response(response)
        except ValueError as e:
            raise ReadFailedError(STEP_RESPONSE, str(e)) from e

        if reading.is_valid:
            logger.info("VOC concentration: %d ppm CO2-equivalent", reading.value)
        else:
            logger.warning("Invalid value %d received", reading.value)
        return reading

    @contextlib.contextmanager
    def _fail_on_error(self) -> Iterator[None]:
        try:
            yield
        except BaseException:
            self._fail()
            raise

    def _fail(self) -> None:
        if self._state not in _TERMINAL_STATES:
            self._release_all()
        self._state = SessionState.FAILED

    def _release_all(self) -> None:
        steps = (
            ("write endpoint", self._writer.close if self._writer else None),
            ("read endpoint", self._reader.close if self._reader else None),
            ("interface", self._release_interface),
            ("device", self._device.close if self._device else None),
        )
        self._writer = self._reader = None
        self._release_interface = None
        self._device = None

        for name, release in steps:
            if release is None:
                continue
            try:
                release()
            except Exception as e:
                logger.warning("Failed to release %s: %s", name, e)

    def _require(self, expected: SessionState, operation: str) -> None:
        if self._state is not expected:
            raise SessionStateError(
                f"Cannot {operation} in state {self._state.value}; "
                f"expected {expected.value}"
            )


def read_voc(adapter: UsbAdapter, config: Optional[SensorConfig] = None) -> VOCReading:
    """Open a fresh session, take one reading and release everything."""
    with SensorSession(adapter, config) as session:
        return session.request_reading()
