from __future__ import annotations

from branchpick.errors import (
    BranchPickError,
    CheckoutError,
    ExitCode,
    RepositoryError,
    TerminalError,
    user_facing_error,
)


def test_exit_codes_are_deterministic() -> None:
    assert int(ExitCode.SUCCESS) == 0
    assert int(ExitCode.INVALID_ARGS) == 2
    assert int(ExitCode.GIT_ERROR) == 5
    assert int(ExitCode.CHECKOUT_ERROR) == 7


def test_error_string_contains_hint() -> None:
    err = BranchPickError("git not found", code=ExitCode.GIT_ERROR, hint="Install git")
    assert "Install git" in str(err)


def test_subclasses_carry_their_exit_codes() -> None:
    assert RepositoryError("x").code == ExitCode.GIT_ERROR
    assert TerminalError("x").code == ExitCode.TERMINAL_ERROR
    checkout = CheckoutError("x", branch="main", stderr="fatal")
    assert checkout.code == ExitCode.CHECKOUT_ERROR
    assert isinstance(checkout, BranchPickError)


def test_user_facing_error_template() -> None:
    text = user_facing_error("Not a git repository", hint="cd into a repository")
    assert text.startswith("Error:")
    assert "Next step" in text
    assert "\n" not in text
