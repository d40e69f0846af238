"""Protocol layer for raw HID reports sent by the keyboard firmware."""

from .report import (
    APP_ID,
    REPORT_VERSION,
    REPORT_TYPE_LAYER,
    MIN_REPORT_LENGTH,
    LayerReportParser,
    decode,
    format_bytes,
    format_status_text,
    mask_to_layer_list,
)

__all__ = [
    "APP_ID",
    "REPORT_VERSION",
    "REPORT_TYPE_LAYER",
    "MIN_REPORT_LENGTH",
    "LayerReportParser",
    "decode",
    "format_bytes",
    "format_status_text",
    "mask_to_layer_list",
]
