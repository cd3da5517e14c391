from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from branchpick.models import Branch

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def sample_branches() -> list[Branch]:
    """Recency-ordered set: feature-y (3m), feature-x (1h), main (2d, current)."""
    return [
        Branch("feature-y", False, NOW - timedelta(minutes=3)),
        Branch("feature-x", False, NOW - timedelta(hours=1)),
        Branch("main", True, NOW - timedelta(days=2)),
    ]


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))
        if "integration" in path.parts:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)
