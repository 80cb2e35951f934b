"""
Scheduling component - future publish/unpublish actions of a record.

Builds the schedule form, validates it against the current time, turns it
into a remote payload and routes the submit to a create or an update.

Invariants:
- The wall-clock time of a form is interpreted in the form's timezone and
  persisted as a UTC instant; the form's date is never mutated.
- "Today" and "now" are taken in the form's timezone, the same zone the
  persisted instant is built in.
- Typed times are reduced to their canonical slot label before use.
- Submit always closes the initiating interaction, whatever the outcome.
- Remote failures on submit and cancel are reported as notifications and
  never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import UTC, date, datetime
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from publish_protect.core.errors import RemoteCallError
from publish_protect.core.ports.host import (
    ConfirmPort,
    HostIds,
    InteractionPort,
    NotifierPort,
)
from publish_protect.domain.entities import ActionKind, ScheduledAction

from .models import (
    LINK,
    SCHEDULED_STATUS,
    ScheduleForm,
    ScheduleValidationError,
    SubmitOutput,
    TimezoneOption,
)
from .ports import ClockPort, ScheduledActionsApiPort
from .time_slots import default_slot, is_valid_time, parse_free_text_time, slot_label_for, to_24_hour

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONES: tuple[TimezoneOption, ...] = (TimezoneOption(label="UTC", value="UTC"),)
DEFAULT_JOBS_URL_TEMPLATE = "https://app.contentful.com/spaces/{space}/jobs"


# --- Payload ---


def to_instant(day: date, slot: str, timezone: str) -> datetime:
    """Combine a calendar day and a slot into an aware instant in ``timezone``."""
    hour, minute = to_24_hour(slot)
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=ZoneInfo(timezone))


def local_now(now: datetime, timezone: str) -> datetime:
    """Wall-clock time in ``timezone`` of the aware instant ``now``."""
    return now.astimezone(ZoneInfo(timezone))


def format_instant(moment: datetime) -> str:
    """ISO-8601 UTC instant with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_payload(
    action_kind: ActionKind,
    day: date,
    slot: str,
    timezone: str,
    target_id: str,
    environment_id: str,
) -> dict[str, Any]:
    """Build the scheduled-action body sent to the remote API."""
    return {
        "action": action_kind,
        "entity": {"sys": {"type": LINK, "linkType": "Entry", "id": target_id}},
        "environment": {
            "sys": {"id": environment_id, "type": LINK, "linkType": "Environment"}
        },
        "scheduledFor": {
            "datetime": format_instant(to_instant(day, slot, timezone)),
            "timezone": timezone,
        },
    }


# --- Validation ---


def normalize_form(form: ScheduleForm) -> ScheduleForm:
    """Replace a typed time ("9:30pm") with its canonical slot label."""
    slot = parse_free_text_time(form.slot)
    if slot is None or slot == form.slot:
        return form
    return replace(form, slot=slot)


def validate_form(form: ScheduleForm, now: datetime) -> list[ScheduleValidationError]:
    """
    Check the slot label, the timezone and that the time is in the future.

    ``now`` is an aware instant; the past check runs on the wall clock of
    the form's timezone.
    """
    errors: list[ScheduleValidationError] = []

    slot = parse_free_text_time(form.slot)
    if slot is None:
        errors.append(
            ScheduleValidationError(
                code="invalid_time",
                message=f"Invalid time: {form.slot}",
                field="slot",
            )
        )

    try:
        wall_now = local_now(now, form.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(
            ScheduleValidationError(
                code="invalid_timezone",
                message=f"Unknown timezone: {form.timezone}",
                field="timezone",
            )
        )
        return errors

    if slot is not None and (
        form.day < wall_now.date() or not is_valid_time(form.day, slot, wall_now)
    ):
        errors.append(
            ScheduleValidationError(
                code="time_in_past",
                message="Scheduled time must be in the future",
                field="slot",
            )
        )

    return errors


# --- Service ---


class SchedulingService:
    """Reads and writes the scheduled actions of one record."""

    def __init__(
        self,
        api: ScheduledActionsApiPort,
        ids: HostIds,
        clock: ClockPort,
        notifier: NotifierPort,
        *,
        timezones: Sequence[TimezoneOption] = DEFAULT_TIMEZONES,
        jobs_url_template: str = DEFAULT_JOBS_URL_TEMPLATE,
    ) -> None:
        if not timezones:
            raise ValueError("At least one timezone option is required")
        self._api = api
        self._ids = ids
        self._clock = clock
        self._notifier = notifier
        self._timezones = tuple(timezones)
        self._jobs_url_template = jobs_url_template

    @property
    def timezones(self) -> tuple[TimezoneOption, ...]:
        return self._timezones

    @property
    def default_timezone(self) -> str:
        return self._timezones[0].value

    def jobs_url(self) -> str:
        """Link to the list of all scheduled actions of the space."""
        return self._jobs_url_template.format(space=self._ids.space)

    # --- Reads ---

    async def list_scheduled(self) -> list[ScheduledAction]:
        """Scheduled actions of the record still waiting to run, soonest first."""
        resources = await self._api.list(self._ids.record_id, self._ids.effective_environment)
        actions = [ScheduledAction.from_api(item) for item in resources]
        return sorted(
            (a for a in actions if a.status == SCHEDULED_STATUS),
            key=lambda a: a.scheduled_for,
        )

    # --- Form ---

    def new_form(self) -> ScheduleForm:
        """Create-mode defaults: publish, today, the safe default slot."""
        now = local_now(self._clock.now_utc(), self.default_timezone)
        return ScheduleForm(
            action_kind="publish",
            day=now.date(),
            slot=default_slot(now),
            timezone=self.default_timezone,
        )

    def form_for(self, action: ScheduledAction) -> ScheduleForm:
        """Edit-mode form prefilled from an existing action."""
        timezone = action.timezone or self.default_timezone
        moment = action.scheduled_for
        if moment.tzinfo is not None:
            moment = moment.astimezone(ZoneInfo(timezone))
        return ScheduleForm(
            action_kind=action.action_kind,
            day=moment.date(),
            slot=slot_label_for(moment),
            timezone=timezone,
            action_id=action.id,
            version=action.version,
        )

    # --- Writes ---

    async def submit(
        self,
        payload: dict[str, Any],
        action_kind: ActionKind,
        *,
        action_id: str | None = None,
        version: int | None = None,
        interaction: InteractionPort | None = None,
    ) -> bool:
        """
        Create, or update when ``action_id`` is given, a scheduled action.

        Returns True when a schedule resulted. The interaction is closed
        with that result on every path.
        """
        scheduled = False
        try:
            if action_id is not None:
                await self._api.update(action_id, version or 1, payload)
                self._notifier.success(f"Updated scheduled {action_kind} action")
                logger.info("Scheduled action %s updated", action_id)
            else:
                await self._api.create(payload)
                self._notifier.success(f"Scheduled {action_kind} action created")
                logger.info("Scheduled %s action created for %s", action_kind, self._ids.record_id)
            scheduled = True
        except RemoteCallError as e:
            logger.warning("Scheduling %s action failed: %s", action_kind, e)
            self._notifier.error(f"Failed to schedule {action_kind} action")
        finally:
            if interaction is not None:
                interaction.close(scheduled)
        return scheduled

    async def submit_form(
        self,
        form: ScheduleForm,
        interaction: InteractionPort | None = None,
    ) -> SubmitOutput:
        """Validate a form and submit it. Invalid forms are not sent."""
        form = normalize_form(form)
        errors = validate_form(form, self._clock.now_utc())
        if errors:
            return SubmitOutput(scheduled=False, errors=tuple(errors))

        payload = build_payload(
            form.action_kind,
            form.day,
            form.slot,
            form.timezone,
            self._ids.record_id,
            self._ids.effective_environment,
        )
        scheduled = await self.submit(
            payload,
            form.action_kind,
            action_id=form.action_id,
            version=form.version,
            interaction=interaction,
        )
        return SubmitOutput(scheduled=scheduled, payload=payload)

    async def cancel(self, action: ScheduledAction, dialogs: ConfirmPort) -> bool:
        """Ask for confirmation, then delete the action. Returns True when deleted."""
        confirmed = await dialogs.confirm(
            "Cancel Schedule?",
            "This will cancel the scheduled action. Are you sure?",
            "Cancel the schedule",
            "Close",
        )
        if not confirmed:
            return False
        try:
            await self._api.delete(action.id, self._ids.effective_environment)
        except RemoteCallError as e:
            logger.warning("Cancelling scheduled action %s failed: %s", action.id, e)
            self._notifier.error("Unable to cancel scheduled action")
            return False
        self._notifier.warning("Scheduled action canceled")
        logger.info("Scheduled action %s canceled", action.id)
        return True
