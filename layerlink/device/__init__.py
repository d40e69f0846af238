"""Device layer for the keyboard's raw HID interface.

This module provides:
- Device discovery and selection (find_device, select_device)
- Connection lifecycle of the single open device (DeviceConnection)
- Layer report decoding and fan-out (LayerMonitor)
- The background watch loop tying them together (LayerWatcher)
"""

from .connection import (
    ConnectionState,
    DeviceConnection,
    DeviceNotConnectedError,
    DeviceReadError,
)
from .layer_monitor import LAYER_STATE_TOPIC, LayerMonitor
from .watcher import ENUM_POLL_INTERVAL, CycleResult, LayerWatcher
from .device_finder import (
    DeviceNotFoundError,
    SnapshotLog,
    find_device,
    is_matching_device,
    log_device_list,
    select_device,
)

__all__ = [
    # Connection
    'ConnectionState',
    'DeviceConnection',
    'DeviceNotConnectedError',
    'DeviceReadError',

    # Reports
    'LAYER_STATE_TOPIC',
    'LayerMonitor',

    # Watch loop
    'ENUM_POLL_INTERVAL',
    'CycleResult',
    'LayerWatcher',

    # Finder
    'DeviceNotFoundError',
    'SnapshotLog',
    'find_device',
    'is_matching_device',
    'log_device_list',
    'select_device',
]
