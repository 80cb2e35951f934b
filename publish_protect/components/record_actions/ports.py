"""
Record actions port definitions.
"""

from __future__ import annotations

from typing import Protocol


class RecordActionsApiPort(Protocol):
    """Remote lifecycle operations on an entry."""

    async def publish(self, record_id: str, version: int) -> None: ...

    async def unpublish(self, record_id: str) -> None: ...

    async def archive(self, record_id: str) -> None: ...

    async def unarchive(self, record_id: str) -> None: ...

    async def find_referrers(self, record_id: str) -> list[str]:
        """Ids of entries that link to ``record_id``."""
        ...
