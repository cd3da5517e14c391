"""Switch the working tree to a branch through the git command line."""

from __future__ import annotations

import logging as py_logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from branchpick.errors import CheckoutError
from branchpick.models import Branch

logger = py_logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    branch: str
    switched: bool


def checkout_branch(
    branch: Branch,
    runner: callable = subprocess.run,
    *,
    repo_path: str | Path = ".",
    git: str = "git",
) -> CheckoutResult:
    if branch.is_current:
        logger.debug("Branch already checked out branch=%s", branch.name)
        return CheckoutResult(branch=branch.name, switched=False)

    cmd = [git, "-C", str(Path(repo_path)), "checkout", branch.name]
    logger.info("Checking out branch=%s", branch.name)
    try:
        completed = runner(cmd, capture_output=True, text=True, check=False)
    except OSError as exc:
        logger.error("Failed to start git checkout branch=%s error=%s", branch.name, exc)
        raise CheckoutError(
            f"Failed to checkout branch {branch.name}: {exc}",
            branch=branch.name,
            hint="Install git or set git_executable in the config file.",
        ) from exc

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        detail = " ".join(stderr.split()) or f"git exited with code {completed.returncode}"
        logger.error(
            "git checkout failed branch=%s returncode=%s stderr=%s",
            branch.name,
            completed.returncode,
            stderr,
        )
        raise CheckoutError(
            f"Failed to checkout branch {branch.name}: {detail}",
            branch=branch.name,
            stderr=stderr,
        )
    return CheckoutResult(branch=branch.name, switched=True)
