"""Thread-safe holder for the current device target.

The target is written by the UI side (settings window) and read by the
watcher thread once per cycle. Writers always replace the whole immutable
DeviceTarget, so a reader never sees a half-updated target.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Union

from .models import DeviceTarget

logger = logging.getLogger(__name__)


class TargetSettings:
    """Current DeviceTarget behind a lock.

    Instances are callable and return the current snapshot, so they can
    be passed directly as a watcher's target provider.

    Example:
        >>> settings = TargetSettings()
        >>> _ = settings.update(vendor_id=0x4653, product_id="0x0001")
        >>> settings.get().vendor_id
        18003
    """

    def __init__(self, initial: Optional[DeviceTarget] = None):
        self._target = initial if initial is not None else DeviceTarget.default()
        self._lock = threading.Lock()

        self._callbacks: List[Callable[[DeviceTarget], None]] = []
        self._callback_lock = threading.Lock()

    def get(self) -> DeviceTarget:
        """Return the current target snapshot."""
        with self._lock:
            return self._target

    def set(self, target: DeviceTarget) -> None:
        """Replace the target.

        Raises:
            TypeError: If target is not a DeviceTarget
        """
        if not isinstance(target, DeviceTarget):
            raise TypeError(f"Expected DeviceTarget, got {type(target).__name__}")

        with self._lock:
            changed = target != self._target
            self._target = target

        if changed:
            logger.info(f"HID settings updated: {target.describe()}")
            self._notify_callbacks(target)

    def update(self, **fields: Union[int, str]) -> DeviceTarget:
        """Replace some fields of the current target.

        The new target is validated before it is stored; on ValueError
        the current target is left untouched.

        Returns:
            The stored target
        """
        with self._lock:
            target = self._target.with_changes(**fields)
            changed = target != self._target
            self._target = target

        if changed:
            logger.info(f"HID settings updated: {target.describe()}")
            self._notify_callbacks(target)
        return target

    def reset(self) -> None:
        """Go back to the default target."""
        self.set(DeviceTarget.default())

    def subscribe(self, callback: Callable[[DeviceTarget], None]) -> Callable[[], None]:
        """Subscribe to target changes.

        Returns:
            Unsubscribe function
        """
        with self._callback_lock:
            self._callbacks.append(callback)

        def unsubscribe():
            with self._callback_lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def _notify_callbacks(self, target: DeviceTarget) -> None:
        with self._callback_lock:
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(target)
            except Exception as e:
                logger.error(f"Error in settings callback: {e}")

    def __call__(self) -> DeviceTarget:
        return self.get()
