from __future__ import annotations

import logging
from typing import List

from ..errors import DeviceNotFoundError, MultipleDevicesError
from ..models import DeviceSelector
from ..transport.base import DeviceHandle, TransportError, UsbAdapter

logger = logging.getLogger(__name__)


def find_devices(
    adapter: UsbAdapter,
    selector: DeviceSelector,
) -> List[DeviceHandle]:
    """
    Find all attached devices matching ``selector``.

    Raises:
        DeviceNotFoundError: If enumeration itself fails.
    """
    logger.info("Scanning for device %s...", selector)
    try:
        handles = adapter.find_devices(selector)
    except TransportError as e:
        raise DeviceNotFoundError(selector, reason=f"list: {e}") from e
    return list(handles)


def find_single_device(
    adapter: UsbAdapter,
    selector: DeviceSelector,
    *,
    require_unique: bool = False,
) -> DeviceHandle:
    """
    Resolve ``selector`` to one device handle.

    Behaviour:
        - 0 matches  -> DeviceNotFoundError
        - 1 match    -> return it
        - >1 matches -> first one (with a warning), or MultipleDevicesError
                        when ``require_unique`` is set

    Every handle not returned is closed.
    """
    matches = find_devices(adapter, selector)

    if not matches:
        raise DeviceNotFoundError(selector)

    if len(matches) > 1:
        described = [handle.describe() for handle in matches]
        if require_unique:
            for handle in matches:
                _close_quietly(handle)
            raise MultipleDevicesError(selector, devices=described)

        logger.warning(
            "Multiple matching devices found, using the first one. Devices: %s",
            described,
        )
        for handle in matches[1:]:
            _close_quietly(handle)

    chosen = matches[0]
    logger.debug("Selected device: %s", chosen.describe())
    return chosen


def _close_quietly(handle: DeviceHandle) -> None:
    try:
        handle.close()
    except Exception as e:
        logger.warning("Error closing device %s: %s", handle.describe(), e)
