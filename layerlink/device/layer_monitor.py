"""Layer monitor that decodes raw reports and fans them out to observers.

The LayerMonitor receives every raw report read from the device, keeps the
latest decoded layer state and forwards it to the event sink, the status
sink and any subscribers. Reports that are not layer reports are logged
and dropped: the raw HID endpoint is shared with other traffic.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from ..models import LayerReport
from ..protocol.report import ReportData, decode, format_bytes, format_status_text

logger = logging.getLogger(__name__)

LAYER_STATE_TOPIC = "layer_state"

EventSink = Callable[[str, LayerReport], None]
StatusSink = Callable[[str], None]


class LayerMonitor:
    """Decodes raw reports and notifies observers.

    Delivery is fire-and-forget: a failing sink or subscriber is logged
    and skipped, never retried, and never stops the caller.

    Performance Note:
        on_data runs on the watcher thread between two reads. Slow
        sinks delay the next read.
    """

    def __init__(
        self,
        event_sink: Optional[EventSink] = None,
        status_sink: Optional[StatusSink] = None,
        topic: str = LAYER_STATE_TOPIC,
    ):
        """Initialize layer monitor.

        Args:
            event_sink: Called as event_sink(topic, report) per decoded report
            status_sink: Called with the status summary text per decoded report
            topic: Event topic passed to event_sink
        """
        self._event_sink = event_sink
        self._status_sink = status_sink
        self._topic = topic

        self._latest_report: Optional[LayerReport] = None
        self._report_callbacks: List[Callable[[LayerReport], None]] = []

        # Thread safety
        self._report_lock = threading.Lock()
        self._callback_lock = threading.Lock()

    @property
    def topic(self) -> str:
        return self._topic

    def on_data(self, chunk: ReportData) -> Optional[LayerReport]:
        """Handle one raw report from the device.

        Args:
            chunk: Raw report bytes

        Returns:
            The decoded LayerReport, or None if the report was ignored
        """
        report = decode(chunk)
        if report is None:
            logger.debug(f"Ignoring non-layer report: {format_bytes(chunk or b'')}")
            return None

        logger.debug(
            f"layer -> highest:{report.highest_layer} "
            f"mask:0b{report.active_layer_mask:08b} version:{report.version}"
        )

        with self._report_lock:
            self._latest_report = report

        self._emit(report)
        self._notify_callbacks(report)
        return report

    def get_latest_report(self) -> Optional[LayerReport]:
        """Get most recently decoded report.

        Returns:
            Latest LayerReport, or None if none decoded yet
        """
        with self._report_lock:
            return self._latest_report

    def reset(self) -> None:
        """Forget the latest report (e.g. after the device went away)."""
        with self._report_lock:
            self._latest_report = None

    def subscribe_reports(self, callback: Callable[[LayerReport], None]) -> Callable[[], None]:
        """Subscribe to decoded layer reports.

        Args:
            callback: Function to call with each LayerReport

        Returns:
            Unsubscribe function
        """
        with self._callback_lock:
            self._report_callbacks.append(callback)

        def unsubscribe():
            with self._callback_lock:
                if callback in self._report_callbacks:
                    self._report_callbacks.remove(callback)

        return unsubscribe

    def _emit(self, report: LayerReport) -> None:
        if self._event_sink is not None:
            try:
                self._event_sink(self._topic, report)
            except Exception as e:
                logger.error(f"Error in event sink: {e}")

        if self._status_sink is not None:
            try:
                self._status_sink(format_status_text(report))
            except Exception as e:
                logger.error(f"Error in status sink: {e}")

    def _notify_callbacks(self, report: LayerReport) -> None:
        with self._callback_lock:
            callbacks = list(self._report_callbacks)

        for callback in callbacks:
            try:
                callback(report)
            except Exception as e:
                logger.error(f"Error in report callback: {e}")
