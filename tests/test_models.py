"""Unit tests for immutable data models."""

import dataclasses
import unittest

from layerlink.models import (
    DEFAULT_PRODUCT_ID,
    DEFAULT_USAGE,
    DEFAULT_USAGE_PAGE,
    DEFAULT_VENDOR_ID,
    DeviceTarget,
    EnumeratedDevice,
    LayerReport,
)


class TestDeviceTarget(unittest.TestCase):
    """Tests for DeviceTarget."""

    def test_defaults(self):
        target = DeviceTarget.default()

        self.assertEqual(target.vendor_id, DEFAULT_VENDOR_ID)
        self.assertEqual(target.product_id, DEFAULT_PRODUCT_ID)
        self.assertEqual(target.usage_page, DEFAULT_USAGE_PAGE)
        self.assertEqual(target.usage, DEFAULT_USAGE)
        self.assertEqual(target.vendor_id, 0x5957)
        self.assertEqual(target.usage_page, 0xFF60)

    def test_value_equality(self):
        """Targets compare by value, used to detect settings changes."""
        self.assertEqual(DeviceTarget(1, 2, 3, 4), DeviceTarget(1, 2, 3, 4))
        self.assertNotEqual(DeviceTarget(1, 2, 3, 4), DeviceTarget(1, 2, 3, 5))

    def test_immutable(self):
        target = DeviceTarget()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            target.vendor_id = 1

    def test_out_of_range_rejected(self):
        with self.assertRaises(ValueError):
            DeviceTarget(vendor_id=0x10000)
        with self.assertRaises(ValueError):
            DeviceTarget(usage=-1)

    def test_non_integer_rejected(self):
        with self.assertRaises(ValueError):
            DeviceTarget(vendor_id=True)
        with self.assertRaises(ValueError):
            DeviceTarget(product_id=1.5)

    def test_hex_string_normalized(self):
        target = DeviceTarget(vendor_id="0x4653")
        self.assertEqual(target.vendor_id, 0x4653)

    def test_with_changes(self):
        target = DeviceTarget().with_changes(usage_page="0xFF61", usage=0x62)

        self.assertEqual(target.usage_page, 0xFF61)
        self.assertEqual(target.usage, 0x62)
        self.assertEqual(target.vendor_id, DEFAULT_VENDOR_ID)

    def test_with_changes_invalid(self):
        with self.assertRaises(ValueError):
            DeviceTarget().with_changes(vendor_id="nope")

    def test_with_changes_unknown_field(self):
        with self.assertRaises(ValueError):
            DeviceTarget().with_changes(bogus=1)

    def test_dict_roundtrip(self):
        target = DeviceTarget(0x1234, 0x5678, 0xFF60, 0x61)
        self.assertEqual(DeviceTarget.from_dict(target.to_dict()), target)

    def test_from_dict_partial_and_hex(self):
        target = DeviceTarget.from_dict({"vendor_id": "0x1234"})

        self.assertEqual(target.vendor_id, 0x1234)
        self.assertEqual(target.product_id, DEFAULT_PRODUCT_ID)

    def test_from_dict_unknown_field(self):
        with self.assertRaises(ValueError):
            DeviceTarget.from_dict({"vid": 1})

    def test_describe(self):
        self.assertEqual(
            DeviceTarget().describe(),
            "5957:0200 (usage_page=0xff60 usage=0x61)",
        )


class TestEnumeratedDevice(unittest.TestCase):
    """Tests for EnumeratedDevice."""

    def test_usage_known(self):
        dev = EnumeratedDevice(vendor_id=1, product_id=2, usage_page=0xFF60, usage=0x61, path=b"/dev/hidraw0")
        self.assertTrue(dev.usage_known)

    def test_usage_unknown_when_both_zero(self):
        dev = EnumeratedDevice(vendor_id=1, product_id=2, usage_page=0, usage=0, path=b"/dev/hidraw0")
        self.assertFalse(dev.usage_known)

    def test_usage_known_when_only_one_zero(self):
        dev = EnumeratedDevice(vendor_id=1, product_id=2, usage_page=0xFF60, usage=0, path=b"p")
        self.assertTrue(dev.usage_known)

    def test_optional_strings_default_none(self):
        dev = EnumeratedDevice(vendor_id=1, product_id=2, usage_page=0, usage=0, path=b"p")

        self.assertIsNone(dev.manufacturer)
        self.assertIsNone(dev.product)
        self.assertIsNone(dev.serial_number)
        self.assertIsNone(dev.bus_type)

    def test_display_path(self):
        dev = EnumeratedDevice(vendor_id=1, product_id=2, usage_page=0, usage=0, path=b"/dev/hidraw3")
        self.assertEqual(dev.display_path, "/dev/hidraw3")


class TestLayerReport(unittest.TestCase):
    """Tests for LayerReport."""

    def setUp(self):
        self.report = LayerReport(
            version=1,
            highest_layer=3,
            active_layer_mask=0b10000101,
            raw=bytes([0xFF, 0x01, 0x00, 0x03, 0b10000101]),
        )

    def test_active_layers(self):
        self.assertEqual(self.report.active_layers, (0, 2, 7))

    def test_no_active_layers(self):
        report = dataclasses.replace(self.report, active_layer_mask=0)
        self.assertEqual(report.active_layers, ())

    def test_is_layer_active(self):
        self.assertTrue(self.report.is_layer_active(0))
        self.assertFalse(self.report.is_layer_active(1))
        self.assertTrue(self.report.is_layer_active(7))
        self.assertFalse(self.report.is_layer_active(8))
        self.assertFalse(self.report.is_layer_active(-1))

    def test_to_dict(self):
        self.assertEqual(self.report.to_dict(), {
            "version": 1,
            "highest_layer": 3,
            "mask": 0b10000101,
            "raw": [0xFF, 0x01, 0x00, 0x03, 0b10000101],
        })

    def test_immutable(self):
        with self.assertRaises(dataclasses.FrozenInstanceError):
            self.report.highest_layer = 0


if __name__ == '__main__':
    unittest.main()
