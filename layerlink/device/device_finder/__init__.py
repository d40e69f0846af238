from .core import (
    SnapshotLog,
    find_device,
    is_matching_device,
    log_device_list,
    select_device,
)
from .errors import DeviceNotFoundError

__all__ = [
    "SnapshotLog",
    "find_device",
    "is_matching_device",
    "log_device_list",
    "select_device",
    "DeviceNotFoundError",
]
