"""Wire the repository, terminal device and session loop together."""

from __future__ import annotations

import logging as py_logging
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from pathlib import Path

from rich.console import Console

from branchpick.git.branch_provider import load_recent_branches
from branchpick.git.checkout import checkout_branch
from branchpick.models import MAX_BRANCHES
from branchpick.picker.render import render_frame, render_row
from branchpick.picker.session import SessionOutcome, run_session
from branchpick.picker.state import BranchListModel
from branchpick.terminal.device import TerminalDevice

logger = py_logging.getLogger(__name__)


@dataclass(frozen=True)
class PickerOptions:
    repo_path: Path = Path(".")
    initial_filter: str = ""
    limit: int = MAX_BRANCHES
    git_executable: str = "git"
    mouse_capture: bool = True


def launch_picker(
    options: PickerOptions,
    *,
    device_factory: Callable[..., TerminalDevice] = TerminalDevice,
    runner: callable = subprocess.run,
) -> SessionOutcome:
    """Run one interactive session and return how it ended.

    The branch load happens inside the terminal scope; any error leaves the
    scope (restoring the terminal) before it reaches the caller.
    """
    with device_factory(mouse_capture=options.mouse_capture) as device:
        result = load_recent_branches(
            options.repo_path,
            runner,
            limit=options.limit,
            git=options.git_executable,
        )
        if result.warning:
            logger.warning(result.warning)
        model = BranchListModel(result.branches)
        if options.initial_filter:
            model.set_filter(options.initial_filter)

        def draw(current: BranchListModel) -> None:
            width, height = device.size
            device.draw(render_frame(current, width=width, height=height))

        return run_session(
            model,
            read_key=device.read_key,
            draw=draw,
            checkout=partial(
                checkout_branch,
                runner=runner,
                repo_path=options.repo_path,
                git=options.git_executable,
            ),
        )


def print_recent_branches(
    options: PickerOptions,
    *,
    console: Console | None = None,
    runner: callable = subprocess.run,
    now: datetime | None = None,
) -> int:
    """Print the recent branches without entering the interactive session."""
    output = console or Console()
    result = load_recent_branches(
        options.repo_path,
        runner,
        limit=options.limit,
        git=options.git_executable,
    )
    model = BranchListModel(result.branches)
    if options.initial_filter:
        model.set_filter(options.initial_filter)
    current_time = now or datetime.now(timezone.utc)
    for branch in model.filtered_branches():
        output.print(render_row(branch, selected=False, now=current_time), soft_wrap=True)
    if result.warning:
        logger.warning(result.warning)
    return len(model.filtered_indices())
