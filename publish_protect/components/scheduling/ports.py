"""
Scheduling component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol


class ScheduledActionsApiPort(Protocol):
    """Remote scheduled-actions API of the space."""

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a scheduled action. Returns the created resource."""
        ...

    async def update(
        self,
        action_id: str,
        version: int,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """Replace a scheduled action carrying its current version."""
        ...

    async def list(self, record_id: str, environment_id: str) -> list[dict[str, Any]]:
        """List scheduled actions targeting a record in an environment."""
        ...

    async def delete(self, action_id: str, environment_id: str) -> None:
        """Delete (cancel) a scheduled action."""
        ...


class ClockPort(Protocol):
    """Source of the current instant."""

    def now_utc(self) -> datetime:
        """Current time as an aware UTC datetime."""
        ...
