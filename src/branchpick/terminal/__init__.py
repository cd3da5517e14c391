"""Terminal device package."""

from .device import DISABLE_MOUSE_CAPTURE, ENABLE_MOUSE_CAPTURE, TerminalDevice

__all__ = [
    "DISABLE_MOUSE_CAPTURE",
    "ENABLE_MOUSE_CAPTURE",
    "TerminalDevice",
]
