"""Public CLI contract and entrypoint."""

from __future__ import annotations

import argparse
import logging as py_logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from .config import PickerConfig, load_config
from .errors import BranchPickError, ExitCode, user_facing_error
from .logging import configure_logging, default_log_path
from .models import MAX_BRANCHES
from .picker.app import PickerOptions, launch_picker, print_recent_branches
from .picker.session import SessionOutcome

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


def _limit_type(value: str) -> int:
    try:
        limit = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("--limit must be an integer") from exc
    if limit < 1 or limit > MAX_BRANCHES:
        raise argparse.ArgumentTypeError(f"--limit must be between 1 and {MAX_BRANCHES}")
    return limit


def _log_level_type(value: str) -> str:
    normalized = value.upper()
    if normalized == "WARNING":
        normalized = "WARN"
    if normalized not in _VALID_LOG_LEVELS:
        accepted = ", ".join(_VALID_LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="branchpick",
        description="Pick one of the most recently used local git branches and check it out.",
    )
    parser.add_argument("--repo", type=Path, default=Path("."), help="Repository working tree")
    parser.add_argument("--filter", dest="initial_filter", default="", help="Initial filter text")
    parser.add_argument("--limit", type=_limit_type, default=None, help="Number of branches to show")
    parser.add_argument(
        "--list",
        dest="list_only",
        action="store_true",
        help="Print the recent branches and exit",
    )
    parser.add_argument(
        "--strict-exit",
        action="store_true",
        help="Return a non-zero exit code when the picker fails",
    )
    parser.add_argument("--no-mouse", action="store_true", help="Do not enable mouse capture")
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--log-level", type=_log_level_type, default=None)
    parser.add_argument("--log-file", type=Path, default=None)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    return parser.parse_args(argv)


def build_options(namespace: argparse.Namespace, config: PickerConfig) -> PickerOptions:
    return PickerOptions(
        repo_path=namespace.repo.expanduser(),
        initial_filter=namespace.initial_filter,
        limit=namespace.limit if namespace.limit is not None else config.max_branches,
        git_executable=config.git_executable,
        mouse_capture=config.mouse_capture and not namespace.no_mouse,
    )


def _report_picker_failure(message: str, *, hint: str, code: ExitCode, strict: bool) -> int:
    # The interactive picker reports on stdout and exits 0 unless strict exit is requested.
    print(user_facing_error(message, hint=hint))
    return int(code) if strict else int(ExitCode.SUCCESS)


def run_picker_flow(
    options: PickerOptions,
    *,
    strict: bool,
    log_path: Path,
    session_runner: Callable[[PickerOptions], SessionOutcome],
) -> int:
    logger = py_logging.getLogger("branchpick.cli")
    try:
        outcome = session_runner(options)
    except BranchPickError as exc:
        logger.error(
            "Picker failed (code=%s): %s",
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        return _report_picker_failure(exc.message, hint=exc.hint, code=exc.code, strict=strict)
    except Exception:
        logger.exception("Unhandled exception in picker session")
        return _report_picker_failure(
            "Unexpected runtime failure",
            hint=f"Inspect logs: {log_path}",
            code=ExitCode.RUNTIME_ERROR,
            strict=strict,
        )

    if outcome.error is not None:
        error = outcome.error
        logger.error("Checkout failed branch=%s: %s", error.branch, error.message)
        return _report_picker_failure(error.message, hint=error.hint, code=error.code, strict=strict)

    if outcome.result is not None:
        logger.info(
            "Session ended action=%s branch=%s switched=%s",
            outcome.action.value,
            outcome.result.branch,
            outcome.result.switched,
        )
    else:
        logger.info("Session ended action=%s", outcome.action.value)
    return int(ExitCode.SUCCESS)


def main(
    argv: Sequence[str] | None = None,
    *,
    session_runner: Callable[[PickerOptions], SessionOutcome] | None = None,
) -> int:
    log_path = default_log_path()
    logger = configure_logging(log_file=log_path)
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code not in (None, 0):
            logger.warning("Argument parsing failed with exit code %s", exc.code)
        return int(exc.code or 0)

    config = load_config(namespace.config)
    if namespace.log_file is not None:
        log_path = namespace.log_file.expanduser()
    level = namespace.log_level or config.log_level
    options = build_options(namespace, config)
    strict = namespace.strict_exit or config.strict_exit

    if namespace.list_only:
        logger = configure_logging(level=level, log_file=log_path)
        logger.debug("Starting list flow repo=%s", options.repo_path)
        try:
            print_recent_branches(options)
        except BranchPickError as exc:
            logger.error(
                "Handled BranchPickError (code=%s): %s",
                int(exc.code),
                exc.message,
                exc_info=logger.isEnabledFor(py_logging.DEBUG),
            )
            print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
            return int(exc.code)
        return int(ExitCode.SUCCESS)

    # Nothing may write to the terminal while the alternate screen is active.
    logger = configure_logging(level=level, log_file=log_path, console=False)
    logger.debug("Starting picker flow repo=%s", options.repo_path)
    return run_picker_flow(
        options,
        strict=strict,
        log_path=log_path,
        session_runner=session_runner or launch_picker,
    )


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
