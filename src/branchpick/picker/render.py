"""Frame rendering for the branch picker."""

from __future__ import annotations

from datetime import datetime, timezone

from rich.console import Group
from rich.text import Text

from branchpick.models import Branch
from branchpick.picker.state import BranchListModel

SELECTED_MARKER = "❯ "
CURRENT_MARKER = "● "
BLANK_MARKER = "  "
DEGRADED_AGE = "?"

FILTER_STYLE = "cyan"
SELECTED_MARKER_STYLE = "magenta"
CURRENT_MARKER_STYLE = "green"
SELECTED_NAME_STYLE = "bold white"
CURRENT_NAME_STYLE = "green"
NAME_STYLE = "grey70"
AGE_STYLE = "grey42"
DEGRADED_AGE_STYLE = "yellow"

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR


def format_age(last_activity: datetime, now: datetime) -> str:
    """Return ``Nd``, ``Nh`` or ``Nm`` for the elapsed time, never ``0m``."""
    seconds = int((now - last_activity).total_seconds())
    if seconds >= _DAY:
        return f"{seconds // _DAY}d"
    if seconds >= _HOUR:
        return f"{seconds // _HOUR}h"
    return f"{max(seconds // _MINUTE, 1)}m"


def render_row(branch: Branch, *, selected: bool, now: datetime) -> Text:
    row = Text(no_wrap=True, overflow="crop")
    if selected:
        row.append(SELECTED_MARKER, style=SELECTED_MARKER_STYLE)
    else:
        row.append(BLANK_MARKER)

    if branch.is_current:
        row.append(CURRENT_MARKER, style=CURRENT_MARKER_STYLE)
    else:
        row.append(BLANK_MARKER)

    if selected:
        name_style = SELECTED_NAME_STYLE
    elif branch.is_current:
        name_style = CURRENT_NAME_STYLE
    else:
        name_style = NAME_STYLE
    row.append(branch.name, style=name_style)

    if branch.degraded:
        row.append(f" ({DEGRADED_AGE})", style=DEGRADED_AGE_STYLE)
    else:
        row.append(f" ({format_age(branch.last_activity, now)})", style=AGE_STYLE)
    return row


def build_lines(
    model: BranchListModel,
    *,
    width: int,
    height: int,
    now: datetime | None = None,
) -> list[Text]:
    current_time = now or datetime.now(timezone.utc)
    lines: list[Text] = []
    if model.filter_text:
        lines.append(Text(f"Filter: {model.filter_text}", style=FILTER_STYLE, no_wrap=True, overflow="crop"))

    selected = model.cursor.selected()
    for position, branch in enumerate(model.filtered_branches()):
        lines.append(render_row(branch, selected=position == selected, now=current_time))

    visible = lines[: max(height, 0)]
    for line in visible:
        line.truncate(max(width, 0), overflow="crop")
    return visible


def render_frame(
    model: BranchListModel,
    *,
    width: int,
    height: int,
    now: datetime | None = None,
) -> Group:
    return Group(*build_lines(model, width=width, height=height, now=now))
