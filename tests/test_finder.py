"""Unit tests for device discovery and the multi-match policy."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from airsensor.errors import DeviceNotFoundError, MultipleDevicesError
from airsensor.models import DeviceSelector
from airsensor.sensor.finder import find_devices, find_single_device
from airsensor.transport.base import TransportError
from fakes import FakeAdapter, FakeDevice

SELECTOR = DeviceSelector(0x03EB, 0x2013)


class TestFindDevices(unittest.TestCase):
    """Tests for listing devices through the adapter."""

    def test_returns_adapter_handles(self):
        """Test every handle the adapter reports is returned open."""
        log = []
        first = FakeDevice(log, name="first")
        second = FakeDevice(log, name="second")
        adapter = FakeAdapter([first, second], log=log)

        result = find_devices(adapter, SELECTOR)

        self.assertEqual(result, [first, second])
        self.assertEqual(log, [("find", "03eb:2013")])
        self.assertFalse(first.closed or second.closed)

    def test_enumeration_failure(self):
        """Test an enumeration error surfaces as DeviceNotFoundError."""
        adapter = FakeAdapter(find_error=TransportError("access denied"))
        with self.assertRaises(DeviceNotFoundError) as ctx:
            find_devices(adapter, SELECTOR)
        self.assertIn("access denied", str(ctx.exception))


class TestFindSingleDevice(unittest.TestCase):
    """Tests for resolving a selector to one device."""

    def test_no_devices(self):
        """Test zero matches raises DeviceNotFoundError."""
        with self.assertRaises(DeviceNotFoundError) as ctx:
            find_single_device(FakeAdapter(), SELECTOR)
        self.assertEqual(ctx.exception.selector, SELECTOR)

    def test_single_device(self):
        """Test a single match is returned and left open."""
        log = []
        device = FakeDevice(log)
        self.assertIs(find_single_device(FakeAdapter([device], log=log), SELECTOR), device)
        self.assertFalse(device.closed)

    def test_multiple_devices_picks_first(self):
        """Test several matches pick the first, warn, and close the rest."""
        log = []
        first = FakeDevice(log, name="first")
        second = FakeDevice(log, name="second")
        adapter = FakeAdapter([first, second], log=log)

        with self.assertLogs("airsensor.sensor.finder", level="WARNING"):
            chosen = find_single_device(adapter, SELECTOR)

        self.assertIs(chosen, first)
        self.assertFalse(first.closed)
        self.assertTrue(second.closed)

    def test_multiple_devices_unique_required(self):
        """Test several matches raise MultipleDevicesError and close every handle."""
        log = []
        first = FakeDevice(log, name="first")
        second = FakeDevice(log, name="second")
        adapter = FakeAdapter([first, second], log=log)

        with self.assertRaises(MultipleDevicesError) as ctx:
            find_single_device(adapter, SELECTOR, require_unique=True)

        self.assertEqual(ctx.exception.devices, ["first", "second"])
        self.assertTrue(first.closed)
        self.assertTrue(second.closed)


if __name__ == '__main__':
    unittest.main()
