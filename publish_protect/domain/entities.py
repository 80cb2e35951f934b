from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

# --- Enums / Literals ---
LifecycleStatus = Literal["new", "draft", "changed", "published", "archived"]
TargetKind = Literal["Entry", "Asset"]
ActionKind = Literal["publish", "unpublish"]
ScheduledActionStatus = Literal["scheduled", "succeeded", "failed", "canceled"]

# --- Records ---


class RecordMeta(BaseModel):
    """Version counters of a record, replaced wholesale on every lifecycle change."""

    model_config = ConfigDict(frozen=True)

    version: int
    published_version: int | None = None
    archived_version: int | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_sys(cls, sys: dict[str, Any]) -> RecordMeta:
        """Build from a host ``sys`` block (camelCase keys)."""
        return cls(
            version=sys["version"],
            published_version=sys.get("publishedVersion"),
            archived_version=sys.get("archivedVersion"),
            updated_at=sys.get("updatedAt"),
        )


# --- Scheduling ---


class ScheduledAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    action_kind: ActionKind
    scheduled_for: datetime
    timezone: str | None = None
    version: int = 1
    status: ScheduledActionStatus = "scheduled"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ScheduledAction:
        """Build from a scheduled-action resource returned by the remote API."""
        sys = data["sys"]
        scheduled_for = data["scheduledFor"]
        return cls(
            id=sys["id"],
            action_kind=data["action"],
            scheduled_for=scheduled_for["datetime"],
            timezone=scheduled_for.get("timezone"),
            version=sys.get("version", 1),
            status=sys.get("status", "scheduled"),
        )
