"""References component - tracks link fields and flags unpublished targets."""

from publish_protect.components.references.component import (
    ReferenceTracker,
    check_reference,
    is_link_field,
    revalidate,
    to_link_references,
    unpublished_reference_message,
    unverified_reference_message,
)
from publish_protect.components.references.models import (
    InvalidReference,
    LinkReference,
    TrackedFieldState,
    UnverifiedPolicy,
)
from publish_protect.components.references.ports import RemoteReadPort

__all__ = [
    # Tracker
    "ReferenceTracker",
    # Functions
    "check_reference",
    "is_link_field",
    "revalidate",
    "to_link_references",
    "unpublished_reference_message",
    "unverified_reference_message",
    # Models
    "InvalidReference",
    "LinkReference",
    "TrackedFieldState",
    "UnverifiedPolicy",
    # Ports
    "RemoteReadPort",
]
