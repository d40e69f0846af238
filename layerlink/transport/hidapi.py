"""HID access layer backed by the hidapi bindings (``import hid``).

hidapi reports devices as plain dicts and reads as lists of ints; this
module converts both to the types the device layer works with and wraps
library failures in HidError.
"""
from __future__ import annotations

import logging
import sys
from typing import Any, Dict, List, Optional

import hid

from ..models import EnumeratedDevice
from .base import HidBackend, HidError, HidHandle

logger = logging.getLogger(__name__)


def _device_from_dict(entry: Dict[str, Any]) -> EnumeratedDevice:
    """Convert one hid.enumerate() entry to EnumeratedDevice."""
    return EnumeratedDevice(
        vendor_id=entry.get("vendor_id", 0),
        product_id=entry.get("product_id", 0),
        usage_page=entry.get("usage_page", 0) or 0,
        usage=entry.get("usage", 0) or 0,
        path=entry.get("path", b""),
        interface_number=entry.get("interface_number", -1),
        release_number=entry.get("release_number", 0) or 0,
        # Older hidapi releases don't report the bus
        bus_type=entry.get("bus_type"),
        manufacturer=entry.get("manufacturer_string") or None,
        product=entry.get("product_string") or None,
        serial_number=entry.get("serial_number") or None,
    )


class HidapiHandle(HidHandle):
    """Open hidapi device."""

    def __init__(self, device: Any, info: EnumeratedDevice):
        self._device: Optional[Any] = device
        self._info = info

    @property
    def info(self) -> EnumeratedDevice:
        return self._info

    def set_nonblocking(self, enabled: bool) -> None:
        if self._device is None:
            raise HidError("Device is closed")
        try:
            self._device.set_nonblocking(1 if enabled else 0)
        except (OSError, ValueError) as e:
            raise HidError(f"Failed to set non-blocking mode: {e}") from e

    def read(self, size: int, timeout_ms: int) -> bytes:
        if self._device is None:
            raise HidError("Device is closed")
        try:
            data = self._device.read(size, timeout_ms)
        except (OSError, ValueError) as e:
            raise HidError(f"Read failed on {self._info.display_path}: {e}") from e
        return bytes(data) if data else b""

    def close(self) -> None:
        if self._device is None:
            return
        device, self._device = self._device, None
        try:
            device.close()
        except (OSError, ValueError) as e:
            logger.warning(f"Error closing {self._info.display_path}: {e}")


class HidapiBackend(HidBackend):
    """HidBackend using the hidapi C library bindings."""

    def __init__(self, open_exclusive: bool = False):
        """Initialize backend.

        Args:
            open_exclusive: On macOS, open devices exclusively. Off by
                default so other raw HID clients (e.g. VIA) keep working.
        """
        if sys.platform == "darwin" and hasattr(hid, "darwin_set_open_exclusive"):
            hid.darwin_set_open_exclusive(1 if open_exclusive else 0)

    def enumerate(self) -> List[EnumeratedDevice]:
        try:
            entries = hid.enumerate()
        except (OSError, ValueError) as e:
            raise HidError(f"HID enumeration failed: {e}") from e
        return [_device_from_dict(entry) for entry in entries]

    def open(self, device: EnumeratedDevice) -> HidHandle:
        handle = hid.device()
        try:
            handle.open_path(device.path)
        except (OSError, ValueError) as e:
            raise HidError(f"Failed to open {device.display_path}: {e}") from e
        return HidapiHandle(handle, device)
