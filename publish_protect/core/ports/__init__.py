# Host collaborator ports (Protocol interfaces); no implementations here

from publish_protect.core.ports.host import (
    ConfirmPort,
    DialogPort,
    FieldPort,
    HostContext,
    HostIds,
    InteractionPort,
    NotifierPort,
    RecordPort,
    Unsubscribe,
)

__all__ = [
    "ConfirmPort",
    "DialogPort",
    "FieldPort",
    "HostContext",
    "HostIds",
    "InteractionPort",
    "NotifierPort",
    "RecordPort",
    "Unsubscribe",
]
