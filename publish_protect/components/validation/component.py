"""
Remote validation workflow - job-based validation of one record.

Two states with distinct entry actions:
- IDLE: a step saves the record (when configured) and creates a remote
  validation job, then moves to PENDING.
- PENDING: a step fetches the job. A finished job replaces the outcome
  (its error message, or none) and moves back to IDLE. An unfinished job
  stays PENDING.

Stimuli:
- trigger(): throttled, trailing edge only; bursts coalesce into one step.
- safety tick: on a fixed period, steps while PENDING so an outstanding job
  is resolved even when no other event fires.

Invariants:
- Steps are serialised by a lock, so at most one job is ever outstanding.
- After close() no step touches state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from publish_protect.core.errors import RemoteCallError
from publish_protect.core.ports.host import HostIds, RecordPort
from publish_protect.core.timers import PeriodicTask, Throttle

from .models import (
    INVALID_SETTINGS_KEY,
    CustomFieldError,
    ValidationJob,
    ValidationOutcome,
    WorkflowState,
)
from .ports import EditorInterfacePort, ValidationApiPort

logger = logging.getLogger(__name__)

DEFAULT_THROTTLE_SECONDS = 0.3
DEFAULT_POLL_INTERVAL_SECONDS = 5.0


def custom_field_message(field_name: str) -> str:
    return f'The field "{field_name}" is invalid'


def find_custom_field_errors(
    controls: list[dict[str, Any]],
    record: RecordPort,
    record_id: str,
) -> tuple[CustomFieldError, ...]:
    """Return an error per control whose invalid-id list names this record."""
    errors: list[CustomFieldError] = []
    for control in controls:
        settings = control.get("settings") or {}
        flagged = settings.get(INVALID_SETTINGS_KEY) if isinstance(settings, dict) else None
        if not isinstance(flagged, str) or record_id not in flagged.split(","):
            continue
        field_id = str(control["fieldId"])
        field = record.fields.get(field_id)
        name = field.name if field is not None else field_id
        errors.append(CustomFieldError(field_id=field_id, message=custom_field_message(name)))
    return tuple(errors)


class ValidationWorkflow:
    """Validation state machine for one record."""

    def __init__(
        self,
        api: ValidationApiPort,
        record: RecordPort,
        ids: HostIds,
        *,
        editor_interface: EditorInterfacePort | None = None,
        throttle_seconds: float = DEFAULT_THROTTLE_SECONDS,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        save_before_validate: bool = True,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._api = api
        self._record = record
        self._ids = ids
        self._editor_interface = editor_interface
        self._save_before_validate = save_before_validate
        self._on_change = on_change

        self._job = ValidationJob()
        self._outcome = ValidationOutcome()
        self._custom_field_errors: tuple[CustomFieldError, ...] = ()
        self._is_validating = False
        self._lock = asyncio.Lock()
        self._closed = False

        self._throttle = Throttle(self.step, throttle_seconds)
        self._ticker = PeriodicTask(
            self._safety_tick,
            poll_interval_seconds,
            name=f"validation poll {ids.record_id}",
        )

    # --- State ---

    @property
    def state(self) -> WorkflowState:
        return WorkflowState.PENDING if self._job.is_outstanding else WorkflowState.IDLE

    @property
    def job(self) -> ValidationJob:
        return self._job

    @property
    def outcome(self) -> ValidationOutcome:
        return self._outcome

    @property
    def custom_field_errors(self) -> tuple[CustomFieldError, ...]:
        return self._custom_field_errors

    @property
    def is_validating(self) -> bool:
        return self._is_validating

    # --- Stimuli ---

    def start(self) -> None:
        """Start the safety tick."""
        self._ticker.start()

    def trigger(self) -> None:
        """Request a step; bursts within the throttle window coalesce."""
        if self._closed:
            return
        self._throttle()

    async def step(self) -> None:
        """Run the entry action of the current state."""
        async with self._lock:
            if self._closed:
                return
            if self._job.is_outstanding:
                await self._resolve_job()
            else:
                await self._create_job()
            await self._refresh_custom_field_errors()
        self._notify()

    def close(self) -> None:
        """Cancel the throttle timer and the safety tick."""
        self._closed = True
        self._throttle.cancel()
        self._ticker.stop()

    # --- Entry actions ---

    async def _create_job(self) -> None:
        self._is_validating = True
        try:
            if self._save_before_validate:
                await self._record.save()
            job_id = await self._api.create_job(self._ids.record_id)
        except RemoteCallError as e:
            logger.warning("Could not start validation of %s: %s", self._ids.record_id, e)
            self._is_validating = False
            return
        if self._closed:
            return
        self._job = ValidationJob(id=job_id)
        logger.info("Validation job %s created for %s", job_id, self._ids.record_id)

    async def _resolve_job(self) -> None:
        job_id = self._job.id
        if job_id is None:
            return
        try:
            result = await self._api.get_job(job_id)
        except RemoteCallError as e:
            logger.warning("Could not fetch validation job %s: %s", job_id, e)
            return
        if self._closed or not result.is_finished:
            return
        self._outcome = ValidationOutcome(error_message=result.error_message)
        self._job = ValidationJob()
        self._is_validating = False
        logger.info(
            "Validation job %s resolved (%s)",
            job_id,
            "valid" if result.error_message is None else "invalid",
        )

    async def _refresh_custom_field_errors(self) -> None:
        if self._editor_interface is None or not self._ids.content_type_id:
            return
        try:
            controls = await self._editor_interface.get_controls(self._ids.content_type_id)
        except RemoteCallError as e:
            logger.warning("Could not read editor interface: %s", e)
            return
        if self._closed:
            return
        self._custom_field_errors = find_custom_field_errors(
            controls, self._record, self._ids.record_id
        )

    async def _safety_tick(self) -> None:
        if self._job.is_outstanding:
            await self.step()

    def _notify(self) -> None:
        if self._on_change is not None and not self._closed:
            self._on_change()
