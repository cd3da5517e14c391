"""Scoped ownership of the controlling terminal for the picker."""

from __future__ import annotations

import logging as py_logging
import os
import select
import sys
import termios
import tty
from collections import deque
from contextlib import suppress
from types import TracebackType

from rich.console import Console, RenderableType
from rich.live import Live

from branchpick.errors import TerminalError
from branchpick.picker.keys import KeyEvent, KeyKind, decode_keys, needs_more_input

logger = py_logging.getLogger(__name__)

ENABLE_MOUSE_CAPTURE = "\x1b[?1000h\x1b[?1006h"
DISABLE_MOUSE_CAPTURE = "\x1b[?1006l\x1b[?1000l"
_READ_SIZE = 64
# How long a trailing ESC waits for the rest of its sequence before it counts as Esc.
ESCAPE_TIMEOUT_SECONDS = 0.05


class TerminalDevice:
    """Raw mode, alternate screen and mouse capture for one picker run.

    Use as a context manager. Everything acquired in ``__enter__`` is
    released in ``__exit__`` whether or not the body raised, so the shell is
    usable again before any error is printed.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        input_fd: int | None = None,
        mouse_capture: bool = True,
    ) -> None:
        self.console = console or Console()
        self._input_fd = input_fd
        self.mouse_capture = mouse_capture
        self._fd: int | None = None
        self._saved_attrs: list | None = None
        self._live: Live | None = None
        self._mouse_enabled = False
        self._pending: deque[KeyEvent] = deque()

    @property
    def size(self) -> tuple[int, int]:
        width, height = self.console.size
        return width, height

    def __enter__(self) -> TerminalDevice:
        fd = self._input_fd if self._input_fd is not None else sys.stdin.fileno()
        if not os.isatty(fd):
            raise TerminalError(
                "Standard input is not a terminal",
                hint="Run branchpick from an interactive shell or use --list.",
            )
        try:
            self._saved_attrs = termios.tcgetattr(fd)
            tty.setraw(fd)
            # Keep output post-processing so rich's "\n" still returns the carriage.
            attrs = termios.tcgetattr(fd)
            attrs[tty.OFLAG] |= termios.OPOST
            termios.tcsetattr(fd, termios.TCSANOW, attrs)
        except termios.error as exc:
            raise TerminalError("Could not switch the terminal to raw mode", hint=str(exc)) from exc
        self._fd = fd
        logger.debug("Terminal raw mode enabled fd=%s", fd)

        try:
            if self.mouse_capture:
                self._write_control(ENABLE_MOUSE_CAPTURE)
                self._mouse_enabled = True
            self._live = Live(
                console=self.console,
                auto_refresh=False,
                screen=True,
                transient=True,
            )
            self._live.start()
        except Exception:
            self._restore()
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self._restore()

    def _write_control(self, sequence: str) -> None:
        self.console.file.write(sequence)
        self.console.file.flush()

    def _restore(self) -> None:
        try:
            if self._live is not None:
                live, self._live = self._live, None
                live.stop()
        finally:
            try:
                if self._mouse_enabled:
                    self._mouse_enabled = False
                    with suppress(OSError, ValueError):
                        self._write_control(DISABLE_MOUSE_CAPTURE)
                self.console.show_cursor(True)
            finally:
                if self._fd is not None and self._saved_attrs is not None:
                    fd, attrs = self._fd, self._saved_attrs
                    self._fd = None
                    self._saved_attrs = None
                    termios.tcsetattr(fd, termios.TCSADRAIN, attrs)
                    logger.debug("Terminal mode restored fd=%s", fd)

    def draw(self, renderable: RenderableType) -> None:
        if self._live is None:
            raise TerminalError("Terminal is not active", hint="Draw only inside the device scope.")
        self._live.update(renderable, refresh=True)

    def _read(self) -> bytes:
        while True:
            try:
                return os.read(self._fd, _READ_SIZE)
            except InterruptedError:
                continue
            except OSError as exc:
                raise TerminalError("Failed to read from the terminal", hint=str(exc)) from exc

    def _input_ready(self, timeout: float) -> bool:
        try:
            readable, _, _ = select.select([self._fd], [], [], timeout)
        except (OSError, ValueError) as exc:
            raise TerminalError("Failed to wait on the terminal", hint=str(exc)) from exc
        return bool(readable)

    def read_key(self) -> KeyEvent:
        """Block until the next key event arrives."""
        if self._fd is None:
            raise TerminalError("Terminal is not active", hint="Read keys only inside the device scope.")
        while not self._pending:
            data = self._read()
            if not data:
                # EOF on the input device ends the session like Ctrl-C.
                return KeyEvent(KeyKind.INTERRUPT)
            while needs_more_input(data) and self._input_ready(ESCAPE_TIMEOUT_SECONDS):
                more = self._read()
                if not more:
                    break
                data += more
            self._pending.extend(decode_keys(data))
        return self._pending.popleft()
