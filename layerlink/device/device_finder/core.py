from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ...models import DeviceTarget, EnumeratedDevice
from ...transport.base import HidBackend
from .errors import DeviceNotFoundError

logger = logging.getLogger(__name__)


def is_matching_device(info: EnumeratedDevice, target: DeviceTarget) -> bool:
    """
    Decide whether a given EnumeratedDevice is the target interface.

    Vendor and product IDs must always match. Usage and usage page must
    match too, unless the backend reported both as zero (e.g. libusb on
    Linux cannot expose them); then VID/PID alone decides. That fallback
    can pick the wrong interface of a composite device that also lacks
    usage info, which is accepted.

    Returns:
        True if the device matches the target.
    """
    if info.vendor_id != target.vendor_id:
        return False

    if info.product_id != target.product_id:
        return False

    if not info.usage_known:
        return True

    return info.usage == target.usage and info.usage_page == target.usage_page


def select_device(
    devices: Iterable[EnumeratedDevice],
    target: DeviceTarget,
) -> Optional[EnumeratedDevice]:
    """
    Pick the first matching device in enumeration order.

    No sorting is applied; the order is whatever the backend produced.

    Returns:
        The matching EnumeratedDevice, or None.
    """
    for info in devices:
        if is_matching_device(info, target):
            return info
    return None


def find_device(
    backend: HidBackend,
    target: DeviceTarget,
    snapshot_log: Optional[SnapshotLog] = None,
) -> EnumeratedDevice:
    """
    Enumerate and select the target device.

    Behaviour:
        - enumeration fails -> HidError propagates
        - 0 matches         -> DeviceNotFoundError
        - >= 1 match        -> first one in enumeration order

    A fresh snapshot is taken on every call, since devices come and go
    between polls. Pass the caller's SnapshotLog so the device count
    is compared against that caller's previous snapshot only.
    """
    devices = backend.enumerate()
    if snapshot_log is not None:
        snapshot_log(devices)
    else:
        log_device_list(devices)

    info = select_device(devices, target)
    if info is None:
        raise DeviceNotFoundError(
            f"No HID device matches {target.describe()}",
            target=target,
            candidates=len(devices),
        )
    return info


def _format_optional(value: Optional[str]) -> str:
    return repr(value) if value is not None else "-"


def log_device_list(
    devices: Sequence[EnumeratedDevice],
    previous_count: Optional[int] = None,
) -> int:
    """Log an enumeration snapshot.

    Every snapshot logs its device count followed by one entry per
    device at DEBUG. The count goes to INFO instead when it differs from
    `previous_count` (always the case for a caller's first snapshot).

    Returns:
        The device count, to pass back as `previous_count` next time.
    """
    count = len(devices)
    if count != previous_count:
        logger.info(f"HID device list: {count} entries")
    else:
        logger.debug(f"HID device list: {count} entries")

    if not logger.isEnabledFor(logging.DEBUG):
        return count

    for idx, dev in enumerate(devices):
        if dev.usage_known:
            usage_info = f"usage_page=0x{dev.usage_page:04x} usage=0x{dev.usage:04x}"
        else:
            usage_info = "usage_page/usage=N/A"
        logger.debug(
            f"#{idx}: {dev.vendor_id:04x}:{dev.product_id:04x} "
            f"path:{dev.display_path} iface:{dev.interface_number} "
            f"rel:0x{dev.release_number:04x} bus:{dev.bus_type} {usage_info}"
        )
        logger.debug(
            f"    mfr:{_format_optional(dev.manufacturer)} "
            f"prod:{_format_optional(dev.product)} "
            f"serial:{_format_optional(dev.serial_number)}"
        )
    return count


class SnapshotLog:
    """Remembers one consumer's last device count for log_device_list."""

    def __init__(self):
        self.last_count: Optional[int] = None

    def __call__(self, devices: Sequence[EnumeratedDevice]) -> None:
        self.last_count = log_device_list(devices, self.last_count)
