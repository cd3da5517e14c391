"""Input loop for the interactive branch picker."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from branchpick.errors import CheckoutError
from branchpick.git.checkout import CheckoutResult
from branchpick.models import Branch
from branchpick.picker.keys import KeyEvent, KeyKind
from branchpick.picker.state import BranchListModel

logger = py_logging.getLogger(__name__)

QUIT_CHARS = frozenset({"q"})
NEXT_CHARS = frozenset({"j"})
PREVIOUS_CHARS = frozenset({"k"})


class SessionAction(str, Enum):
    QUIT = "quit"
    CHECKOUT = "checkout"


@dataclass(frozen=True)
class SessionOutcome:
    action: SessionAction
    branch: Branch | None = None
    result: CheckoutResult | None = None
    error: CheckoutError | None = None


Checkout = Callable[[Branch], CheckoutResult]


class PickerSession:
    """Translates key events into model mutations or a terminal action."""

    def __init__(self, model: BranchListModel, checkout: Checkout) -> None:
        self.model = model
        self._checkout = checkout

    def handle_key(self, event: KeyEvent) -> SessionOutcome | None:
        """Apply ``event``; return an outcome when the session should end."""
        kind = event.kind
        if kind in (KeyKind.ESCAPE, KeyKind.INTERRUPT):
            return SessionOutcome(SessionAction.QUIT)
        if kind == KeyKind.CHAR and event.char in QUIT_CHARS:
            return SessionOutcome(SessionAction.QUIT)
        if kind == KeyKind.DOWN or (kind == KeyKind.CHAR and event.char in NEXT_CHARS):
            self.model.move_next()
        elif kind == KeyKind.UP or (kind == KeyKind.CHAR and event.char in PREVIOUS_CHARS):
            self.model.move_previous()
        elif kind == KeyKind.ENTER:
            return self._confirm()
        elif kind == KeyKind.BACKSPACE:
            self.model.remove_last_char()
        elif kind == KeyKind.CHAR:
            self.model.append_char(event.char)
        return None

    def _confirm(self) -> SessionOutcome:
        branch = self.model.selected_branch()
        if branch is None:
            logger.debug("Enter pressed with no selection")
            return SessionOutcome(SessionAction.CHECKOUT)
        try:
            result = self._checkout(branch)
        except CheckoutError as exc:
            return SessionOutcome(SessionAction.CHECKOUT, branch=branch, error=exc)
        return SessionOutcome(SessionAction.CHECKOUT, branch=branch, result=result)


def is_actionable(event: KeyEvent) -> bool:
    return event.kind not in (KeyKind.MOUSE, KeyKind.UNKNOWN)


def run_session(
    model: BranchListModel,
    *,
    read_key: Callable[[], KeyEvent],
    draw: Callable[[BranchListModel], None],
    checkout: Checkout,
) -> SessionOutcome:
    """Draw, wait for a key, apply it; repeat until quit or confirm."""
    session = PickerSession(model, checkout)
    draw(model)
    while True:
        event = read_key()
        if not is_actionable(event):
            continue
        outcome = session.handle_key(event)
        if outcome is not None:
            logger.debug("Session finished action=%s branch=%s", outcome.action.value, outcome.branch)
            return outcome
        draw(model)
