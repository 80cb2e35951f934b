"""
Scheduling component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from publish_protect.domain.entities import ActionKind, ScheduledAction

# --- Constants ---

LINK = "Link"
SCHEDULED_STATUS = "scheduled"

# --- Validation Error ---


@dataclass(frozen=True)
class ScheduleValidationError:
    """Schedule form validation error."""

    code: str
    message: str
    field: str | None = None


# --- Timezones ---


@dataclass(frozen=True)
class TimezoneOption:
    """A selectable timezone: display label and IANA identifier."""

    label: str
    value: str


# --- Dialog ---


@dataclass(frozen=True)
class ScheduleDialogParams:
    """Parameters passed when opening the schedule dialog."""

    record_id: str
    action: ScheduledAction | None = None

    @property
    def is_edit(self) -> bool:
        return self.action is not None


@dataclass(frozen=True)
class ScheduleForm:
    """
    Values of the schedule dialog.

    ``action_id``/``version`` are set in edit mode and route the submit
    to an update instead of a create.
    """

    action_kind: ActionKind
    day: date
    slot: str
    timezone: str
    action_id: str | None = None
    version: int = 1

    @property
    def is_edit(self) -> bool:
        return self.action_id is not None


# --- Output ---


@dataclass(frozen=True)
class SubmitOutput:
    """Result of a submit: whether a schedule resulted, plus any form errors."""

    scheduled: bool
    errors: tuple[ScheduleValidationError, ...] = ()
    payload: dict[str, Any] | None = None
