"""Reference tracker port definitions."""

from __future__ import annotations

from typing import Protocol

from publish_protect.domain.entities import RecordMeta, TargetKind


class RemoteReadPort(Protocol):
    """Read access to other records through the remote API."""

    async def get_record_meta(self, target_id: str, kind: TargetKind) -> RecordMeta:
        """
        Fetch a record's lifecycle metadata.

        Raises:
            NotFoundError: the target does not exist or has been deleted.
            RemoteCallError: any other transport failure.
        """
        ...
