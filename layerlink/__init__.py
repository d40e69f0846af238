"""Layerlink - keyboard layer status over raw HID."""

from .models import (
    DeviceTarget,
    EnumeratedDevice,
    LayerReport,
)
from .settings import TargetSettings
from .protocol import decode, format_status_text, mask_to_layer_list
from .transport import HidBackend, HidError, HidHandle
from .device import (
    ConnectionState,
    DeviceConnection,
    LayerMonitor,
    LayerWatcher,
)

__all__ = [
    "DeviceTarget",
    "EnumeratedDevice",
    "LayerReport",
    "TargetSettings",
    "decode",
    "format_status_text",
    "mask_to_layer_list",
    "HidBackend",
    "HidError",
    "HidHandle",
    "ConnectionState",
    "DeviceConnection",
    "LayerMonitor",
    "LayerWatcher",
]
