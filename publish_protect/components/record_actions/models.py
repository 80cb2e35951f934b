"""
Record actions models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from publish_protect.domain.entities import LifecycleStatus

RecordAction = Literal["publish", "unpublish", "archive", "unarchive"]

DEFAULT_EDITOR_URL_TEMPLATE = (
    "https://app.contentful.com/spaces/{space}/environments/{environment}/entries/{record_id}"
)

PUBLISH_BUTTON_LABELS: dict[LifecycleStatus, str] = {
    "new": "Publish",
    "draft": "Publish",
    "changed": "Publish Changes",
    "published": "Change Status",
    "archived": "Unarchive",
}

# Statuses that must be unpublished before archiving.
LIVE_STATUSES: tuple[LifecycleStatus, ...] = ("published", "changed")


@dataclass(frozen=True)
class ActionOutcome:
    """What a record action did."""

    action: RecordAction | None
    performed: bool
    blocked_by: tuple[str, ...] = ()
    error: str | None = None
