"""Watch loop driving the keyboard connection.

Runs on one dedicated background thread for the lifetime of the process:
reads the current target, (re)seeks the device, performs bounded reads and
hands every report to the LayerMonitor. Nothing here is fatal; every
failure degrades to "retry after the poll interval" or "ignore this input".
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from ..models import DeviceTarget, LayerReport
from ..transport.base import HidBackend
from ..transport.hidapi import HidapiBackend
from .connection import (
    READ_TIMEOUT_MS,
    DeviceConnection,
    DeviceReadError,
    StateCallback,
)
from .layer_monitor import EventSink, LayerMonitor, StatusSink

logger = logging.getLogger(__name__)

ENUM_POLL_INTERVAL = 0.5  # seconds

TargetProvider = Callable[[], DeviceTarget]


class CycleResult(Enum):
    """Outcome of one watch cycle."""
    WAIT = "wait"   # no device or read failed, sleep poll_interval
    IDLE = "idle"   # read timed out without data
    DATA = "data"   # a report was read (decoded or ignored)


class LayerWatcher:
    """Keeps the keyboard connected and publishes its layer state.

    This class acts as a facade, managing:
    1. The device connection (DeviceConnection)
    2. Report decoding and fan-out (LayerMonitor)
    3. The background watch thread

    Example:
        >>> settings = TargetSettings()
        >>> watcher = LayerWatcher(settings, status_sink=print)
        >>> watcher.start()
        >>> # Later...
        >>> watcher.stop()
    """

    def __init__(
        self,
        target_provider: TargetProvider,
        backend: Optional[HidBackend] = None,
        event_sink: Optional[EventSink] = None,
        status_sink: Optional[StatusSink] = None,
        poll_interval: float = ENUM_POLL_INTERVAL,
        read_timeout_ms: int = READ_TIMEOUT_MS,
    ):
        """Initialize watcher.

        Args:
            target_provider: Returns the current DeviceTarget (thread-safe)
            backend: HID access layer, or None for hidapi
            event_sink: Receives (topic, LayerReport) per decoded report
            status_sink: Receives the status summary text per decoded report
            poll_interval: Seconds to wait after a failed seek or read
            read_timeout_ms: Timeout of each read
        """
        self._target_provider = target_provider
        self._poll_interval = poll_interval
        self._read_timeout_ms = read_timeout_ms

        # Components
        self._connection = DeviceConnection(backend or HidapiBackend())
        self._monitor = LayerMonitor(event_sink=event_sink, status_sink=status_sink)

        # Threading
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def connection(self) -> DeviceConnection:
        return self._connection

    @property
    def monitor(self) -> LayerMonitor:
        return self._monitor

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_connected(self) -> bool:
        return self._connection.is_connected()

    @property
    def latest_report(self) -> Optional[LayerReport]:
        return self._monitor.get_latest_report()

    def subscribe_reports(self, callback: Callable[[LayerReport], None]) -> Callable[[], None]:
        return self._monitor.subscribe_reports(callback)

    def subscribe_state(self, callback: StateCallback) -> Callable[[], None]:
        return self._connection.subscribe_state(callback)

    def run_cycle(self) -> CycleResult:
        """Run one watch cycle.

        1. Read the current target
        2. Drop the device if the target changed
        3. Seek the device if disconnected
        4. One bounded read, decoded by the monitor

        Returns:
            CycleResult telling the caller whether to wait before the
            next cycle
        """
        try:
            target = self._target_provider()
        except Exception as e:
            logger.error(f"Failed to read HID settings: {e}")
            return CycleResult.WAIT

        self._connection.apply_target(target)

        if not self._connection.is_connected():
            if not self._connection.seek(target):
                return CycleResult.WAIT

        try:
            data = self._connection.read(self._read_timeout_ms)
        except DeviceReadError:
            return CycleResult.WAIT

        if not data:
            return CycleResult.IDLE

        self._monitor.on_data(data)
        return CycleResult.DATA

    def run(self) -> None:
        """Run cycles until stop() is called.

        Blocks the calling thread; use start() for a background thread.
        """
        logger.info("Watch loop started")
        try:
            while not self._stop_event.is_set():
                try:
                    result = self.run_cycle()
                except Exception:
                    # Keep watching; an unexpected failure is retried like any other
                    logger.exception("Unexpected error in watch loop")
                    self._connection.disconnect("unexpected error")
                    result = CycleResult.WAIT

                if result is CycleResult.WAIT:
                    self._stop_event.wait(self._poll_interval)
        finally:
            self._connection.disconnect("watcher stopped")
            logger.info("Watch loop stopped")

    def start(self) -> None:
        """Start the watch loop on a background thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run,
            daemon=True,
            name="LayerWatcher"
        )
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the watch loop and close the device."""
        self._stop_event.set()
        if self._thread is threading.current_thread():
            # Called from a sink or subscriber; run() disconnects on exit
            return
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"Watch loop did not stop within {timeout}s")
                return
        self._thread = None
        # Covers cycles driven manually through run_cycle()
        self._connection.disconnect("watcher stopped")

    def __enter__(self) -> LayerWatcher:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
