"""Filter and selection state for the branch picker."""

from __future__ import annotations

from dataclasses import dataclass, field

from branchpick.models import Branch


@dataclass
class SelectionCursor:
    """Highlighted position within the filtered list.

    Navigation wraps at both ends. The position is ``None`` only while the
    filtered list is empty.
    """

    position: int | None = None

    def reset(self, list_len: int) -> None:
        self.position = 0 if list_len > 0 else None

    def next(self, list_len: int) -> None:
        if list_len <= 0:
            return
        if self.position is None or self.position >= list_len - 1:
            self.position = 0
        else:
            self.position += 1

    def previous(self, list_len: int) -> None:
        if list_len <= 0:
            return
        if self.position is None:
            self.position = 0
        elif self.position == 0 or self.position > list_len - 1:
            self.position = list_len - 1
        else:
            self.position -= 1

    def selected(self) -> int | None:
        return self.position


def matches_filter(name: str, filter_text: str) -> bool:
    return filter_text.lower() in name.lower()


@dataclass
class BranchListModel:
    branches: list[Branch]
    filter_text: str = ""
    cursor: SelectionCursor = field(default_factory=SelectionCursor)
    _filtered: list[int] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self.branches = list(self.branches)
        self._refilter()

    def _refilter(self) -> None:
        if not self.filter_text:
            self._filtered = list(range(len(self.branches)))
        else:
            self._filtered = [
                index
                for index, branch in enumerate(self.branches)
                if matches_filter(branch.name, self.filter_text)
            ]
        self.cursor.reset(len(self._filtered))

    def set_filter(self, text: str) -> None:
        self.filter_text = text
        self._refilter()

    def append_char(self, char: str) -> None:
        self.set_filter(self.filter_text + char)

    def remove_last_char(self) -> None:
        self.set_filter(self.filter_text[:-1])

    def filtered_indices(self) -> list[int]:
        return list(self._filtered)

    def filtered_branches(self) -> list[Branch]:
        return [self.branches[index] for index in self._filtered]

    def move_next(self) -> None:
        self.cursor.next(len(self._filtered))

    def move_previous(self) -> None:
        self.cursor.previous(len(self._filtered))

    def selected_branch(self) -> Branch | None:
        position = self.cursor.selected()
        if position is None or position >= len(self._filtered):
            return None
        return self.branches[self._filtered[position]]
