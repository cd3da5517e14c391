from __future__ import annotations

import io
import logging as py_logging
import subprocess

import pytest
from rich.console import Console

from branchpick.errors import RepositoryError
from branchpick.picker.app import PickerOptions, launch_picker, print_recent_branches
from branchpick.picker.keys import KeyEvent, KeyKind
from branchpick.picker.session import SessionAction


def _cp(returncode: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


_COMMIT_TIMES = {"sha-main": 1700000000, "sha-feature-x": 1700003600, "sha-feature-y": 1700007200}
_LISTING = "\n".join(
    [
        "\x00".join(["main", "*", "sha-main"]),
        "\x00".join(["feature-x", " ", "sha-feature-x"]),
        "\x00".join(["feature-y", " ", "sha-feature-y"]),
    ]
)


class FakeDevice:
    def __init__(self, keys: list[KeyEvent], events: list[str], *, mouse_capture: bool = True) -> None:
        self._keys = list(keys)
        self.events = events
        self.mouse_capture = mouse_capture
        self.frames: list[object] = []
        self.size = (80, 24)

    def __enter__(self) -> FakeDevice:
        self.events.append("enter")
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.events.append("exit")

    def draw(self, renderable: object) -> None:
        self.frames.append(renderable)

    def read_key(self) -> KeyEvent:
        return self._keys.pop(0)


def _git(commands: list[list[str]], *, listing: str = _LISTING, inside: int = 0):
    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        commands.append(cmd)
        if cmd[3] == "rev-parse":
            return _cp(inside, "true\n" if inside == 0 else "", "" if inside == 0 else "fatal: not a git repository")
        if cmd[3] == "for-each-ref":
            return _cp(0, listing)
        if cmd[3] == "log":
            return _cp(0, "".join(f"{obj}\x00{_COMMIT_TIMES[obj]}\n" for obj in cmd[6:]))
        if cmd[3] == "checkout":
            return _cp(0)
        raise AssertionError(cmd)

    return runner


def test_launch_picker_checks_out_filtered_selection() -> None:
    events: list[str] = []
    commands: list[list[str]] = []
    keys = [KeyEvent(KeyKind.CHAR, "f"), KeyEvent(KeyKind.DOWN), KeyEvent(KeyKind.ENTER)]
    devices: list[FakeDevice] = []

    def factory(**kwargs: object) -> FakeDevice:
        device = FakeDevice(keys, events, **kwargs)
        devices.append(device)
        return device

    outcome = launch_picker(PickerOptions(repo_path="/tmp/repo"), device_factory=factory, runner=_git(commands))

    assert outcome.action == SessionAction.CHECKOUT
    assert outcome.branch.name == "feature-x"
    assert commands[-1] == ["git", "-C", "/tmp/repo", "checkout", "feature-x"]
    assert events == ["enter", "exit"]
    assert len(devices[0].frames) == 3


def test_launch_picker_applies_initial_filter_and_mouse_option() -> None:
    events: list[str] = []
    devices: list[FakeDevice] = []

    def factory(**kwargs: object) -> FakeDevice:
        device = FakeDevice([KeyEvent(KeyKind.ENTER)], events, **kwargs)
        devices.append(device)
        return device

    outcome = launch_picker(
        PickerOptions(initial_filter="MAI", mouse_capture=False),
        device_factory=factory,
        runner=_git([]),
    )

    assert outcome.branch.name == "main"
    assert outcome.result.switched is False
    assert devices[0].mouse_capture is False


def test_repository_error_leaves_device_scope_first() -> None:
    events: list[str] = []

    def factory(**kwargs: object) -> FakeDevice:
        return FakeDevice([], events, **kwargs)

    with pytest.raises(RepositoryError):
        launch_picker(PickerOptions(), device_factory=factory, runner=_git([], inside=128))
    assert events == ["enter", "exit"]


def test_print_recent_branches_lists_in_recency_order() -> None:
    console = Console(file=io.StringIO(), width=80, color_system=None)

    count = print_recent_branches(PickerOptions(), console=console, runner=_git([]))

    lines = console.file.getvalue().splitlines()
    assert count == 3
    assert [line.split()[0] for line in lines] == ["feature-y", "feature-x", "●"]
    assert lines[2].strip().startswith("● main")


class _ListHandler(py_logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=py_logging.DEBUG)
        self.records: list[py_logging.LogRecord] = []

    def emit(self, record: py_logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def app_log_records():
    logger = py_logging.getLogger("branchpick.picker.app")
    handler = _ListHandler()
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(py_logging.DEBUG)
    try:
        yield handler.records
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)


def test_detached_head_is_logged_as_warning_in_picker(app_log_records: list[py_logging.LogRecord]) -> None:
    detached = _LISTING.replace("main\x00*", "main\x00 ")

    def factory(**kwargs: object) -> FakeDevice:
        return FakeDevice([KeyEvent(KeyKind.CHAR, "q")], [], **kwargs)

    launch_picker(PickerOptions(), device_factory=factory, runner=_git([], listing=detached))

    warnings = [record for record in app_log_records if record.levelno == py_logging.WARNING]
    assert [record.getMessage() for record in warnings] == ["Detached HEAD detected. No branch is marked as current."]


def test_detached_head_is_logged_as_warning_in_list_mode(app_log_records: list[py_logging.LogRecord]) -> None:
    detached = _LISTING.replace("main\x00*", "main\x00 ")
    console = Console(file=io.StringIO(), width=80, color_system=None)

    print_recent_branches(PickerOptions(), console=console, runner=_git([], listing=detached))

    assert any(
        record.levelno == py_logging.WARNING and "Detached HEAD" in record.getMessage()
        for record in app_log_records
    )
