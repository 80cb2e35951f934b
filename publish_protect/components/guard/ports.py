"""
Record guard port definitions.
"""

from __future__ import annotations

from dataclasses import dataclass

from publish_protect.components.record_actions import RecordActionsApiPort
from publish_protect.components.references import RemoteReadPort
from publish_protect.components.scheduling import ScheduledActionsApiPort
from publish_protect.components.validation import EditorInterfacePort, ValidationApiPort


@dataclass(frozen=True)
class RemotePorts:
    """The remote APIs a record guard talks to."""

    reads: RemoteReadPort
    validation: ValidationApiPort
    editor_interface: EditorInterfacePort
    scheduled_actions: ScheduledActionsApiPort
    record_actions: RecordActionsApiPort
