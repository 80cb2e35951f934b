"""Record actions component - guarded publish/unpublish/archive."""

from publish_protect.components.record_actions.component import (
    RecordActions,
    is_publish_disabled,
    publish_button_label,
    referrers_message,
)
from publish_protect.components.record_actions.models import (
    DEFAULT_EDITOR_URL_TEMPLATE,
    ActionOutcome,
    RecordAction,
)
from publish_protect.components.record_actions.ports import RecordActionsApiPort

__all__ = [
    # Actions
    "RecordActions",
    "is_publish_disabled",
    "publish_button_label",
    "referrers_message",
    # Models
    "DEFAULT_EDITOR_URL_TEMPLATE",
    "ActionOutcome",
    "RecordAction",
    # Ports
    "RecordActionsApiPort",
]
