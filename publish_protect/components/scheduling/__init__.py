"""Scheduling component - time slots and scheduled publish/unpublish actions."""

from publish_protect.components.scheduling.component import (
    DEFAULT_JOBS_URL_TEMPLATE,
    SchedulingService,
    build_payload,
    format_instant,
    local_now,
    normalize_form,
    to_instant,
    validate_form,
)
from publish_protect.components.scheduling.models import (
    ScheduleDialogParams,
    ScheduleForm,
    ScheduleValidationError,
    SubmitOutput,
    TimezoneOption,
)
from publish_protect.components.scheduling.ports import ClockPort, ScheduledActionsApiPort
from publish_protect.components.scheduling.time_slots import (
    TIME_SLOTS,
    available_slots,
    default_slot,
    is_same_day,
    is_valid_time,
    parse_free_text_time,
    resolve_free_text_time,
    slot_label_for,
    to_24_hour,
)

__all__ = [
    # Service
    "DEFAULT_JOBS_URL_TEMPLATE",
    "SchedulingService",
    "build_payload",
    "format_instant",
    "local_now",
    "normalize_form",
    "to_instant",
    "validate_form",
    # Time slots
    "TIME_SLOTS",
    "available_slots",
    "default_slot",
    "is_same_day",
    "is_valid_time",
    "parse_free_text_time",
    "resolve_free_text_time",
    "slot_label_for",
    "to_24_hour",
    # Models
    "ScheduleDialogParams",
    "ScheduleForm",
    "ScheduleValidationError",
    "SubmitOutput",
    "TimezoneOption",
    # Ports
    "ClockPort",
    "ScheduledActionsApiPort",
]
