"""Branch domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

MAX_BRANCHES = 10


@dataclass(frozen=True)
class Branch:
    name: str
    is_current: bool
    last_activity: datetime
    # True when the commit timestamp could not be resolved and "now" was used.
    degraded: bool = False
