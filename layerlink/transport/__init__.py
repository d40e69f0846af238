"""HID access layer for keyboard communication."""

from .base import HidBackend, HidError, HidHandle
from .hidapi import HidapiBackend, HidapiHandle

__all__ = ["HidBackend", "HidError", "HidHandle", "HidapiBackend", "HidapiHandle"]
