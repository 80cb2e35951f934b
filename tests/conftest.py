from datetime import UTC, datetime
from pathlib import Path

import pytest

from publish_protect.adapters.clock import FrozenClock
from publish_protect.rules.loader import load_rules
from publish_protect.rules.models import Rules


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def rules(project_root: Path) -> Rules:
    """Rules loaded from the real rules.yaml at the project root."""
    return load_rules(project_root / "rules.yaml")


@pytest.fixture
def clock() -> FrozenClock:
    """Clock pinned to 2:05 PM UTC on a Friday."""
    return FrozenClock(datetime(2024, 3, 15, 14, 5, tzinfo=UTC))
