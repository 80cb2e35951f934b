"""Record guard component - combined publish gate of one record."""

from publish_protect.components.guard.component import (
    RecordGuard,
    SnapshotListener,
    create_record_guard,
)
from publish_protect.components.guard.models import GuardSnapshot
from publish_protect.components.guard.ports import RemotePorts

__all__ = [
    # Guard
    "RecordGuard",
    "SnapshotListener",
    "create_record_guard",
    # Models
    "GuardSnapshot",
    # Ports
    "RemotePorts",
]
