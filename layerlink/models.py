"""Immutable data models for HID device targeting and layer reports.

All models are frozen dataclasses to ensure immutability and thread-safety.
These models serve as the contract between the transport, device and
application layers.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple, Union

# Defaults for the keyboard's raw HID interface
DEFAULT_VENDOR_ID = 0x5957
DEFAULT_PRODUCT_ID = 0x0200
DEFAULT_USAGE_PAGE = 0xFF60
DEFAULT_USAGE = 0x61

MAX_U16 = 0xFFFF
LAYER_COUNT = 8


def _parse_u16(name: str, value: Union[int, str]) -> int:
    """Parse an int or hex/decimal string into a 16-bit value."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, str):
        try:
            value = int(value.strip(), 0)
        except ValueError:
            raise ValueError(f"{name} is not a number: {value!r}") from None
    if not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if not 0 <= value <= MAX_U16:
        raise ValueError(f"{name} out of range (0..0xFFFF): {value:#x}")
    return value


@dataclass(frozen=True)
class DeviceTarget:
    """Identity of the HID interface to connect to.

    Compared by value: a target that differs from the one used to open
    the current device means the device has to be sought again.

    Attributes:
        vendor_id: USB Vendor ID
        product_id: USB Product ID
        usage_page: HID usage page of the raw interface
        usage: HID usage of the raw interface
    """
    vendor_id: int = DEFAULT_VENDOR_ID
    product_id: int = DEFAULT_PRODUCT_ID
    usage_page: int = DEFAULT_USAGE_PAGE
    usage: int = DEFAULT_USAGE

    def __post_init__(self) -> None:
        # Frozen, so normalized values go through object.__setattr__
        for field in fields(self):
            value = _parse_u16(field.name, getattr(self, field.name))
            object.__setattr__(self, field.name, value)

    @classmethod
    def default(cls) -> DeviceTarget:
        """Target for the stock keyboard firmware."""
        return cls()

    def with_changes(self, **changes: Union[int, str]) -> DeviceTarget:
        """Return a copy with some fields replaced (hex strings allowed).

        Raises:
            ValueError: On an unknown field name or an invalid value
        """
        known = {field.name for field in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ValueError(f"Unknown target fields: {', '.join(unknown)}")
        parsed = {name: _parse_u16(name, value) for name, value in changes.items()}
        return replace(self, **parsed)

    def describe(self) -> str:
        return (
            f"{self.vendor_id:04x}:{self.product_id:04x} "
            f"(usage_page=0x{self.usage_page:04x} usage=0x{self.usage:02x})"
        )

    def to_dict(self) -> Dict[str, int]:
        """Convert to a plain dict (e.g. for a settings UI)."""
        return {
            "vendor_id": self.vendor_id,
            "product_id": self.product_id,
            "usage_page": self.usage_page,
            "usage": self.usage,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Union[int, str]]) -> DeviceTarget:
        """Load from a mapping; missing keys fall back to the defaults."""
        known = {field.name for field in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown target fields: {sorted(unknown)}")
        return cls(**{name: _parse_u16(name, value) for name, value in data.items()})


@dataclass(frozen=True)
class EnumeratedDevice:
    """Snapshot of one HID interface as reported by enumeration.

    Attributes:
        vendor_id: USB Vendor ID
        product_id: USB Product ID
        usage_page: HID usage page, 0 if the backend cannot report it
        usage: HID usage, 0 if the backend cannot report it
        path: Backend specific path used to open the interface
        interface_number: USB interface number (-1 if unknown)
        release_number: Device release number (bcdDevice)
        bus_type: Bus kind (USB, Bluetooth, ...) if reported
        manufacturer: Manufacturer string, if available
        product: Product string, if available
        serial_number: Serial number string, if available
    """
    vendor_id: int
    product_id: int
    usage_page: int
    usage: int
    path: bytes
    interface_number: int = -1
    release_number: int = 0
    bus_type: Optional[int] = None
    manufacturer: Optional[str] = None
    product: Optional[str] = None
    serial_number: Optional[str] = None

    @property
    def usage_known(self) -> bool:
        """False when the backend could not expose usage information."""
        return not (self.usage == 0 and self.usage_page == 0)

    @property
    def display_path(self) -> str:
        if isinstance(self.path, bytes):
            return self.path.decode("utf-8", errors="replace")
        return str(self.path)


@dataclass(frozen=True)
class LayerReport:
    """Decoded layer status report.

    Only built by the report codec from bytes that passed header
    validation.

    Attributes:
        version: Report protocol version
        highest_layer: Highest active layer index
        active_layer_mask: Bit i set means layer i is active (layers 0-7)
        raw: Original report bytes
    """
    version: int
    highest_layer: int
    active_layer_mask: int
    raw: bytes

    @property
    def active_layers(self) -> Tuple[int, ...]:
        """Indices of active layers in ascending order."""
        return tuple(
            bit for bit in range(LAYER_COUNT)
            if self.active_layer_mask & (1 << bit)
        )

    def is_layer_active(self, layer: int) -> bool:
        if not 0 <= layer < LAYER_COUNT:
            return False
        return bool(self.active_layer_mask & (1 << layer))

    def to_dict(self) -> Dict[str, Any]:
        """Payload representation for event sinks."""
        return {
            "version": self.version,
            "highest_layer": self.highest_layer,
            "mask": self.active_layer_mask,
            "raw": list(self.raw),
        }
