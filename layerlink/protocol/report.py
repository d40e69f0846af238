"""Layer report codec for the keyboard's raw HID endpoint.

Decodes incoming raw reports into LayerReport values.
Pure functions with no side effects.

Wire layout:
    offset 0   app id          0xFF
    offset 1   version         0x01
    offset 2   report type     0x00 (layer)
    offset 3   highest layer   any byte
    offset 4   active mask     bit i = layer i active
    offset 5+  padding         ignored
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence, Union

from ..models import LAYER_COUNT, LayerReport

APP_ID = 0xFF
REPORT_VERSION = 0x01
REPORT_TYPE_LAYER = 0x00

HEADER = (APP_ID, REPORT_VERSION, REPORT_TYPE_LAYER)
MIN_REPORT_LENGTH = 5

ReportData = Union[bytes, bytearray, memoryview, Sequence[int]]


class LayerReportParser:
    """Parser for the layer status report.

    The endpoint is shared with other raw HID traffic, so anything that
    does not carry the layer header is rejected rather than treated as an
    error.
    """

    @staticmethod
    def parse(data: Optional[ReportData]) -> Optional[LayerReport]:
        """Parse one raw report.

        Args:
            data: Report bytes (hidapi returns a list of ints)

        Returns:
            LayerReport if the header is valid, None otherwise

        Examples:
            >>> report = LayerReportParser.parse([0xFF, 0x01, 0x00, 0x03, 0b101])
            >>> report.highest_layer, report.active_layer_mask
            (3, 5)
        """
        if not data or len(data) < MIN_REPORT_LENGTH:
            return None

        try:
            raw = bytes(data)
        except (TypeError, ValueError):
            # Not byte-like, or ints outside 0..255
            return None

        if tuple(raw[:3]) != HEADER:
            return None

        return LayerReport(
            version=raw[1],
            highest_layer=raw[3],
            active_layer_mask=raw[4],
            raw=raw,
        )


def decode(data: Optional[ReportData]) -> Optional[LayerReport]:
    """Decode a raw report, returning None if it is not a layer report."""
    return LayerReportParser.parse(data)


def mask_to_layer_list(mask: int) -> str:
    """Render the active layer mask as e.g. "0,2"."""
    return ",".join(
        str(bit) for bit in range(LAYER_COUNT) if mask & (1 << bit)
    )


def format_status_text(report: LayerReport) -> str:
    """Summary line for status displays (tray tooltip and title)."""
    return (
        f"layer={report.highest_layer} "
        f"active=[{mask_to_layer_list(report.active_layer_mask)}]"
    )


def format_bytes(data: Iterable[int]) -> str:
    return " ".join(f"{byte:02x}" for byte in data)
