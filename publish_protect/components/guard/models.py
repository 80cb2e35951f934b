"""
Record guard models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from publish_protect.components.references import InvalidReference
from publish_protect.components.validation import CustomFieldError
from publish_protect.domain.entities import LifecycleStatus, ScheduledAction


@dataclass(frozen=True)
class GuardSnapshot:
    """Everything the presentation layer shows for one record."""

    status: LifecycleStatus
    invalid_references: tuple[InvalidReference, ...] = ()
    validation_message: str | None = None
    custom_field_errors: tuple[CustomFieldError, ...] = ()
    scheduled_actions: tuple[ScheduledAction, ...] = ()
    last_saved_at: datetime | None = None
    is_loading: bool = True
    is_validating: bool = False

    @property
    def is_invalid(self) -> bool:
        """Publishing is blocked while loading or while any problem is known."""
        return (
            self.is_loading
            or bool(self.invalid_references)
            or self.validation_message is not None
            or bool(self.custom_field_errors)
        )

    @property
    def validation_messages(self) -> list[str]:
        messages = [self.validation_message] if self.validation_message else []
        messages.extend(ref.message for ref in self.invalid_references)
        messages.extend(error.message for error in self.custom_field_errors)
        return messages

    @property
    def is_action_scheduled(self) -> bool:
        return bool(self.scheduled_actions)
