"""Local branch provider ordered by most recent commit."""

from __future__ import annotations

import logging as py_logging
import subprocess
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from branchpick.errors import RepositoryError
from branchpick.models import MAX_BRANCHES, Branch

logger = py_logging.getLogger(__name__)

# Only ref metadata here: reading commit objects would make one broken ref fail the listing.
_FOR_EACH_REF_FORMAT = "%00".join(["%(refname:lstrip=2)", "%(HEAD)", "%(objectname)"])
_COMMIT_TIME_FORMAT = "%H%x00%ct"


@dataclass
class BranchListResult:
    branches: list[Branch] = field(default_factory=list)
    warning: str = ""


@dataclass(frozen=True)
class _BranchRef:
    name: str
    is_current: bool
    object_name: str


def _run_git(repo: Path, args: list[str], runner: callable, git: str = "git") -> subprocess.CompletedProcess:
    cmd = [git, "-C", str(repo), *args]
    return runner(cmd, capture_output=True, text=True, check=False)


def _parse_timestamp(raw: str) -> datetime | None:
    value = raw.strip()
    if not value:
        return None
    try:
        seconds = int(value)
    except ValueError:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_ref(line: str) -> _BranchRef | None:
    parts = line.split("\0")
    name = parts[0].strip() if parts else ""
    if not name:
        logger.warning("Skipping branch record without a name record=%r", line)
        return None
    head_marker = parts[1].strip() if len(parts) > 1 else ""
    object_name = parts[2].strip() if len(parts) > 2 else ""
    return _BranchRef(name=name, is_current=head_marker == "*", object_name=object_name)


def _parse_commit_times(output: str) -> dict[str, datetime]:
    times: dict[str, datetime] = {}
    for line in output.splitlines():
        object_name, _, raw_time = line.partition("\0")
        timestamp = _parse_timestamp(raw_time)
        if object_name.strip() and timestamp is not None:
            times[object_name.strip()] = timestamp
    return times


def _resolve_commit_times(
    repo: Path,
    object_names: list[str],
    runner: callable,
    git: str,
) -> dict[str, datetime]:
    """Map commit ids to committer time.

    One ``git log --no-walk`` covers the common case. When any object is
    missing or not a commit that call fails as a whole, so each object is then
    looked up on its own and failures are left out of the result.
    """
    unique = list(dict.fromkeys(name for name in object_names if name))
    if not unique:
        return {}

    batch = _run_git(
        repo,
        ["log", "--no-walk=unsorted", f"--format={_COMMIT_TIME_FORMAT}", *unique],
        runner,
        git,
    )
    if batch.returncode == 0:
        return _parse_commit_times(batch.stdout)

    logger.debug("Batch commit lookup failed, resolving per branch stderr=%s", batch.stderr.strip())
    times: dict[str, datetime] = {}
    for object_name in unique:
        single = _run_git(
            repo,
            ["show", "-s", f"--format={_COMMIT_TIME_FORMAT}", f"{object_name}^{{commit}}"],
            runner,
            git,
        )
        if single.returncode != 0:
            logger.debug("Commit lookup failed object=%s stderr=%s", object_name, single.stderr.strip())
            continue
        times.update(_parse_commit_times(single.stdout))
    return times


def load_recent_branches(
    repo_path: str | Path = ".",
    runner: callable = subprocess.run,
    *,
    limit: int = MAX_BRANCHES,
    git: str = "git",
    now: datetime | None = None,
) -> BranchListResult:
    """Return local branches, most recently committed first.

    Branches whose commit cannot be resolved are kept with ``now`` as their
    timestamp and ``degraded`` set. Only repository-level failures raise.
    """
    repo = Path(repo_path)
    resolved_limit = max(1, min(int(limit), MAX_BRANCHES))
    current_time = now or datetime.now(timezone.utc)
    logger.debug("Loading recent branches repo=%s limit=%s", repo, resolved_limit)

    try:
        inside = _run_git(repo, ["rev-parse", "--is-inside-work-tree"], runner, git)
    except OSError as exc:
        logger.error("Failed to run git repo=%s error=%s", repo, exc)
        raise RepositoryError(
            f"Could not run {git}",
            hint="Install git or set git_executable in the config file.",
        ) from exc
    if inside.returncode != 0 or inside.stdout.strip() != "true":
        logger.error("Repository is not accessible repo=%s stderr=%s", repo, inside.stderr.strip())
        raise RepositoryError(
            f"Not a git repository: {repo}",
            hint="Run branchpick inside a git working tree.",
        )

    listing = _run_git(
        repo,
        ["for-each-ref", f"--format={_FOR_EACH_REF_FORMAT}", "refs/heads"],
        runner,
        git,
    )
    if listing.returncode != 0:
        logger.error("Failed to list local branches repo=%s stderr=%s", repo, listing.stderr.strip())
        raise RepositoryError(
            f"Failed to list local branches for {repo}",
            hint="Run `git branch` manually to inspect repository state.",
        )

    refs = [ref for ref in (_parse_ref(line) for line in listing.stdout.splitlines() if line.strip()) if ref]
    commit_times = _resolve_commit_times(repo, [ref.object_name for ref in refs], runner, git)

    branches: list[Branch] = []
    for ref in refs:
        timestamp = commit_times.get(ref.object_name)
        if timestamp is None:
            logger.warning(
                "Could not resolve commit time branch=%s object=%s; using now",
                ref.name,
                ref.object_name or "-",
            )
            branches.append(Branch(ref.name, ref.is_current, current_time, degraded=True))
        else:
            branches.append(Branch(ref.name, ref.is_current, timestamp))

    warning = ""
    if branches and not any(branch.is_current for branch in branches):
        warning = "Detached HEAD detected. No branch is marked as current."
        logger.warning("Detached HEAD detected repo=%s", repo)

    branches.sort(key=lambda branch: branch.last_activity, reverse=True)
    recent = branches[:resolved_limit]
    logger.debug("Discovered %s local branches, keeping %s repo=%s", len(branches), len(recent), repo)
    return BranchListResult(branches=recent, warning=warning)
