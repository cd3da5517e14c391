"""Decode raw terminal input into key events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class KeyKind(str, Enum):
    CHAR = "char"
    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    BACKSPACE = "backspace"
    ESCAPE = "escape"
    INTERRUPT = "interrupt"
    MOUSE = "mouse"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class KeyEvent:
    kind: KeyKind
    char: str = ""


_SEQUENCES = {
    "\x1b[A": KeyKind.UP,
    "\x1bOA": KeyKind.UP,
    "\x1b[B": KeyKind.DOWN,
    "\x1bOB": KeyKind.DOWN,
    "\x1b": KeyKind.ESCAPE,
    "\r": KeyKind.ENTER,
    "\n": KeyKind.ENTER,
    "\x7f": KeyKind.BACKSPACE,
    "\x08": KeyKind.BACKSPACE,
    "\x03": KeyKind.INTERRUPT,
}
# X10 and SGR mouse reports.
_MOUSE_PREFIXES = ("\x1b[M", "\x1b[<")


def decode_key(data: bytes | str) -> KeyEvent:
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    if not text:
        return KeyEvent(KeyKind.UNKNOWN)
    kind = _SEQUENCES.get(text)
    if kind is not None:
        return KeyEvent(kind)
    if text.startswith(_MOUSE_PREFIXES):
        return KeyEvent(KeyKind.MOUSE)
    if text.startswith("\x1b"):
        return KeyEvent(KeyKind.UNKNOWN)
    if len(text) == 1 and text.isprintable():
        return KeyEvent(KeyKind.CHAR, text)
    return KeyEvent(KeyKind.UNKNOWN)


def _split_escape(text: str, start: int) -> int:
    """Return the end index of the escape sequence starting at ``start``."""
    if start + 1 >= len(text):
        return start + 1
    if text[start + 1] not in "[O":
        # Alt+key arrives as ESC followed by the key.
        return start + 2
    if text.startswith("\x1b[M", start):
        return min(start + 6, len(text))
    index = start + 2
    while index < len(text):
        if "\x40" <= text[index] <= "\x7e":
            return index + 1
        index += 1
    return len(text)


def split_input(data: bytes | str) -> list[str]:
    """Split one read from the terminal into individual key chunks."""
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    chunks: list[str] = []
    index = 0
    while index < len(text):
        if text[index] == "\x1b":
            end = _split_escape(text, index)
        else:
            end = index + 1
        chunks.append(text[index:end])
        index = end
    return chunks


def decode_keys(data: bytes | str) -> list[KeyEvent]:
    return [decode_key(chunk) for chunk in split_input(data)]


def needs_more_input(data: bytes | str) -> bool:
    """True when ``data`` ends inside an escape sequence, or with a lone ESC."""
    chunks = split_input(data)
    if not chunks or not chunks[-1].startswith("\x1b"):
        return False
    last = chunks[-1]
    if last == "\x1b":
        return True
    if last[1] not in "[O":
        return False
    if last.startswith("\x1b[M"):
        return len(last) < 6
    return len(last) == 2 or not "\x40" <= last[-1] <= "\x7e"
