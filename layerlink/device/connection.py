"""Connection manager for the keyboard's raw HID interface.

The keyboard exposes a vendor raw HID interface (usage page 0xFF60) that
carries layer status reports among other traffic.

This module handles:
- Seeking the target interface over a fresh enumeration
- Owning the single open device handle
- Bounded reads, dropping the handle on I/O errors
- Dropping the handle when the target changes

Note: This is a RAW BYTE layer. It does not interpret reports.
      Use LayerMonitor to decode them.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, List, Optional

from ..models import DeviceTarget, EnumeratedDevice
from ..transport.base import HidBackend, HidError, HidHandle
from .device_finder import DeviceNotFoundError, SnapshotLog, find_device

logger = logging.getLogger(__name__)

READ_SIZE = 64  # bytes, one raw HID report
READ_TIMEOUT_MS = 300


class ConnectionState(Enum):
    """Connection state of the target device."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class DeviceReadError(HidError):
    """Raised when a read fails; the connection has already been dropped."""
    pass


class DeviceNotConnectedError(RuntimeError):
    """Raised when reading without an open device."""
    pass


StateCallback = Callable[[ConnectionState, Optional[EnumeratedDevice]], None]


class DeviceConnection:
    """Owns the connection to one HID interface.

    State machine:
        DISCONNECTED --seek(target), match + open--> CONNECTED
        DISCONNECTED --seek(target), no match / error--> DISCONNECTED
        CONNECTED --read error--> DISCONNECTED
        CONNECTED --target changed--> DISCONNECTED

    The handle is never shared: only the thread driving seek() and
    read() touches it.

    Example:
        >>> connection = DeviceConnection(HidapiBackend())
        >>> if connection.seek(DeviceTarget.default()):
        ...     data = connection.read(timeout_ms=300)
        >>> connection.disconnect()
    """

    def __init__(self, backend: HidBackend, read_size: int = READ_SIZE):
        """Initialize connection.

        Args:
            backend: HID access layer used to enumerate and open devices
            read_size: Maximum bytes per read (one report)
        """
        self._backend = backend
        self._read_size = read_size

        self._handle: Optional[HidHandle] = None
        self._device: Optional[EnumeratedDevice] = None
        self._target: Optional[DeviceTarget] = None
        self._state = ConnectionState.DISCONNECTED
        self._snapshot_log = SnapshotLog()

        # Callbacks
        self._state_callbacks: List[StateCallback] = []
        self._callback_lock = threading.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def device(self) -> Optional[EnumeratedDevice]:
        """Enumerated info of the open device, None while disconnected."""
        return self._device

    @property
    def target(self) -> Optional[DeviceTarget]:
        """Target the current connection (or next seek) is for."""
        return self._target

    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED and self._handle is not None

    def apply_target(self, target: DeviceTarget) -> bool:
        """Make `target` the active target.

        A changed target may no longer match the open device, so the
        handle is dropped even if it is still readable.

        Returns:
            True if the target changed.
        """
        if target == self._target:
            return False

        previous, self._target = self._target, target
        if previous is not None:
            logger.info(f"Target changed: {previous.describe()} -> {target.describe()}")
        if self._handle is not None:
            self._close_handle("target changed")
        return True

    def seek(self, target: DeviceTarget) -> bool:
        """Find and open the device for `target`.

        Does nothing while connected to the same target. Failures are
        logged and leave the connection DISCONNECTED; the caller retries
        after its poll interval.

        Returns:
            True if connected after the call.
        """
        self.apply_target(target)

        if self.is_connected():
            return True

        try:
            info = find_device(self._backend, target, self._snapshot_log)
        except DeviceNotFoundError as e:
            logger.debug(str(e))
            return False
        except HidError as e:
            logger.error(f"HID enumeration error: {e}")
            return False

        try:
            handle = self._backend.open(info)
        except HidError as e:
            logger.error(f"Open error {target.vendor_id:04x}:{target.product_id:04x}: {e}")
            return False

        try:
            handle.set_nonblocking(True)
        except HidError as e:
            logger.error(f"Failed to configure {info.display_path}: {e}")
            handle.close()
            return False

        self._handle = handle
        self._device = info
        self._set_state(ConnectionState.CONNECTED)
        logger.info(
            f"Connected to {target.vendor_id:04x}:{target.product_id:04x} "
            f"at {info.display_path}"
        )
        return True

    def read(self, timeout_ms: int = READ_TIMEOUT_MS) -> bytes:
        """Read one report with a bounded timeout.

        Returns:
            Report bytes, or b"" if nothing arrived within the timeout

        Raises:
            DeviceNotConnectedError: If no device is open
            DeviceReadError: If the read failed; the handle is closed
                and the state is DISCONNECTED
        """
        if self._handle is None:
            raise DeviceNotConnectedError("No device open")

        try:
            data = self._handle.read(self._read_size, timeout_ms)
        except HidError as e:
            logger.error(f"Read error (will re-enumerate): {e}")
            self._close_handle("read error")
            raise DeviceReadError(str(e)) from e

        if data:
            logger.debug(f"rx {len(data)} bytes")
        return data

    def disconnect(self, reason: str = "requested") -> None:
        """Close the open device, if any. Safe to call repeatedly."""
        if self._handle is None:
            return
        self._close_handle(reason)

    def subscribe_state(self, callback: StateCallback) -> Callable[[], None]:
        """Subscribe to connection state changes.

        Callback receives (state, device); device is None on disconnect.

        Returns:
            Unsubscribe function
        """
        with self._callback_lock:
            self._state_callbacks.append(callback)

        def unsubscribe():
            with self._callback_lock:
                if callback in self._state_callbacks:
                    self._state_callbacks.remove(callback)

        return unsubscribe

    # Internal methods

    def _close_handle(self, reason: str) -> None:
        handle, self._handle = self._handle, None
        device, self._device = self._device, None

        if handle is not None:
            try:
                handle.close()
            except Exception as e:
                logger.error(f"Error closing device: {e}")

        if device is not None:
            logger.info(f"Disconnected from {device.display_path} ({reason})")
        self._set_state(ConnectionState.DISCONNECTED)

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        self._state = state
        self._notify_state_callbacks()

    def _notify_state_callbacks(self) -> None:
        with self._callback_lock:
            callbacks = list(self._state_callbacks)

        for callback in callbacks:
            try:
                callback(self._state, self._device)
            except Exception as e:
                logger.error(f"Error in state callback: {e}")

    def __enter__(self) -> DeviceConnection:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()
