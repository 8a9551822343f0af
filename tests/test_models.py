"""Unit tests for immutable configuration and reading models."""

import unittest
from dataclasses import FrozenInstanceError

from airsensor.models import (
    DeviceSelector,
    Direction,
    ReadingStatus,
    SensorConfig,
    VOCReading,
)


class TestDeviceSelector(unittest.TestCase):
    """Tests for vendor:product parsing."""

    def test_default_is_known_sensor(self):
        """Test the default selector is the known sensor ID."""
        selector = DeviceSelector()
        self.assertEqual(selector.vendor_id, 0x03EB)
        self.assertEqual(selector.product_id, 0x2013)
        self.assertEqual(str(selector), "03eb:2013")

    def test_parse(self):
        """Test parsing of vendor:product strings."""
        self.assertEqual(DeviceSelector.parse("03eb:2013"), DeviceSelector(0x03EB, 0x2013))
        self.assertEqual(DeviceSelector.parse(" 1D6B:0002 "), DeviceSelector(0x1D6B, 0x0002))

    def test_parse_rejects_malformed(self):
        """Test malformed selector strings raise ValueError."""
        for text in ("", "03eb", "03eb:", ":2013", "03eb:2013:1", "zzzz:2013"):
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    DeviceSelector.parse(text)

    def test_out_of_range_ids(self):
        """Test IDs outside 16 bits are rejected."""
        with self.assertRaises(ValueError):
            DeviceSelector(0x10000, 1)
        with self.assertRaises(ValueError):
            DeviceSelector(1, -1)

    def test_immutable(self):
        """Test the selector is frozen."""
        selector = DeviceSelector()
        with self.assertRaises(FrozenInstanceError):
            selector.vendor_id = 1


class TestSensorConfig(unittest.TestCase):
    """Tests for session configuration."""

    def test_defaults(self):
        """Test default configuration values."""
        cfg = SensorConfig()
        self.assertEqual(cfg.selector, DeviceSelector())
        self.assertEqual(cfg.configuration, 1)
        self.assertEqual(cfg.interface, 0)
        self.assertEqual(cfg.alt_setting, 0)
        self.assertEqual(cfg.endpoint, 1)
        self.assertEqual(cfg.write_endpoint, 2)
        self.assertEqual(cfg.debug, 3)
        self.assertIsNone(cfg.timeout_ms)
        self.assertEqual(cfg.stale_flush_size, 0)
        self.assertEqual(cfg.flush_size, 16)
        self.assertFalse(cfg.require_unique)

    def test_addresses_carry_direction(self):
        """Test endpoint addresses include the direction bit."""
        cfg = SensorConfig(endpoint=1, write_endpoint=2)
        self.assertEqual(cfg.read_address, 0x81)
        self.assertEqual(cfg.write_address, 0x02)

    def test_invalid_values(self):
        """Test invalid configuration values raise ValueError."""
        with self.assertRaises(ValueError):
            SensorConfig(endpoint=0)
        with self.assertRaises(ValueError):
            SensorConfig(write_endpoint=16)
        with self.assertRaises(ValueError):
            SensorConfig(read_size=3)
        with self.assertRaises(ValueError):
            SensorConfig(timeout_ms=-1)
        with self.assertRaises(ValueError):
            SensorConfig(stale_flush_size=-1)

    def test_zero_timeout_allowed(self):
        """Test a zero timeout is accepted as wait forever."""
        self.assertEqual(SensorConfig(timeout_ms=0).timeout_ms, 0)


class TestDirection(unittest.TestCase):

    def test_flags(self):
        """Test direction flags."""
        self.assertEqual(Direction.IN.flag, 0x80)
        self.assertEqual(Direction.OUT.flag, 0x00)


class TestVOCReading(unittest.TestCase):
    """Tests for reading reports."""

    def test_describe_valid(self):
        """Test the report line for a valid reading."""
        reading = VOCReading(1730, ReadingStatus.VALID)
        self.assertTrue(reading.is_valid)
        self.assertEqual(reading.describe(), "VOC concentration: 1730 ppm CO2-equivalent")

    def test_describe_invalid(self):
        """Test the report line for an out-of-range reading."""
        reading = VOCReading(32767, ReadingStatus.OUT_OF_RANGE)
        self.assertFalse(reading.is_valid)
        self.assertEqual(reading.describe(), "ERROR: invalid value 32767 received")


if __name__ == '__main__':
    unittest.main()
