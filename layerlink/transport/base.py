"""Abstract base classes for the HID access layer.

The HidBackend interface provides a clean abstraction over the host's HID
stack. The device layer only ever talks to these classes, so a backend can
be swapped (hidapi, a recorded trace, a test fake) without touching the
connection logic.

Key principles:
- Enumeration returns fresh immutable snapshots (EnumeratedDevice)
- Handles are owned by exactly one caller and closed explicitly
- Every read is bounded by a timeout
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..models import EnumeratedDevice


class HidError(OSError):
    """Raised when the host HID stack fails to enumerate, open or read."""
    pass


class HidHandle(ABC):
    """An open connection to one HID interface."""

    @abstractmethod
    def set_nonblocking(self, enabled: bool) -> None:
        """Switch the handle between blocking and non-blocking reads."""
        pass

    @abstractmethod
    def read(self, size: int, timeout_ms: int) -> bytes:
        """Read one input report.

        Args:
            size: Maximum number of bytes to read
            timeout_ms: Maximum time to wait for a report

        Returns:
            Report bytes, or empty bytes if the timeout expired

        Raises:
            HidError: If the device failed (e.g. unplugged)
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the handle. Should be safe to call multiple times."""
        pass

    def __enter__(self) -> HidHandle:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class HidBackend(ABC):
    """Access to the host's HID devices."""

    @abstractmethod
    def enumerate(self) -> List[EnumeratedDevice]:
        """List all HID interfaces currently present.

        Raises:
            HidError: If the device list could not be obtained
        """
        pass

    @abstractmethod
    def open(self, device: EnumeratedDevice) -> HidHandle:
        """Open an enumerated interface.

        Raises:
            HidError: If the interface could not be opened
        """
        pass
