"""Deterministic error model and exit code contract."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4
    GIT_ERROR = 5
    TERMINAL_ERROR = 6
    CHECKOUT_ERROR = 7


@dataclass
class BranchPickError(Exception):
    message: str
    code: ExitCode = ExitCode.RUNTIME_ERROR
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


@dataclass
class RepositoryError(BranchPickError):
    """The repository could not be opened or its branches listed."""

    code: ExitCode = ExitCode.GIT_ERROR


@dataclass
class CheckoutError(BranchPickError):
    """The external checkout command failed for ``branch``."""

    code: ExitCode = ExitCode.CHECKOUT_ERROR
    branch: str = ""
    stderr: str = ""


@dataclass
class TerminalError(BranchPickError):
    code: ExitCode = ExitCode.TERMINAL_ERROR


def user_facing_error(message: str, *, hint: str = "") -> str:
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
