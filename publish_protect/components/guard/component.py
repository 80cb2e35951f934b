"""
Record guard - composes the publish checks of one open record.

Wires the host's notifications into the reference tracker, the validation
workflow and the scheduling service, and publishes one combined snapshot.

Event routing:
- link field change: tracker updates and revalidates; validation triggered
- other field change: validation triggered
- lifecycle change: status and last-saved time updated, scheduled actions
  refreshed, validation triggered, references revalidated

Invariants:
- close() releases every host subscription and stops every timer before
  returning; nothing touches the snapshot afterwards.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import replace
from typing import Any

from publish_protect.components.record_actions import RecordActions
from publish_protect.components.references import ReferenceTracker, is_link_field
from publish_protect.components.scheduling import (
    ClockPort,
    ScheduleDialogParams,
    SchedulingService,
    TimezoneOption,
)
from publish_protect.components.validation import ValidationWorkflow
from publish_protect.core.errors import RemoteCallError
from publish_protect.core.ports.host import HostContext, Unsubscribe
from publish_protect.domain.entities import RecordMeta, ScheduledAction
from publish_protect.domain.status import derive_status
from publish_protect.rules.models import Rules

from .models import GuardSnapshot
from .ports import RemotePorts

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[GuardSnapshot], None]


class RecordGuard:
    """Publish gate for one record."""

    def __init__(
        self,
        host: HostContext,
        tracker: ReferenceTracker,
        workflow: ValidationWorkflow,
        scheduling: SchedulingService,
        actions: RecordActions | None = None,
    ) -> None:
        self._host = host
        self._tracker = tracker
        self._workflow = workflow
        self._scheduling = scheduling
        self.actions = actions

        meta = host.record.get_sys()
        self._snapshot = GuardSnapshot(status=derive_status(meta), last_saved_at=meta.updated_at)
        self._listeners: list[SnapshotListener] = []
        self._subscriptions = ExitStack()
        self._tasks: set[asyncio.Task[Any]] = set()
        self._started = False
        self._closed = False

    @property
    def snapshot(self) -> GuardSnapshot:
        return self._snapshot

    @property
    def scheduling(self) -> SchedulingService:
        return self._scheduling

    # --- Lifecycle ---

    def start(self) -> None:
        """Subscribe to the host and start background checks."""
        if self._started or self._closed:
            return
        self._started = True

        for field in self._host.record.fields.values():
            if not is_link_field(field):
                unsubscribe = field.on_value_changed(self._on_plain_field_changed)
                self._subscriptions.callback(unsubscribe)
        self._subscriptions.callback(self._host.record.on_sys_changed(self._on_sys_changed))

        self._tracker.initialize(self._host.record.fields)
        self._workflow.start()
        self._spawn(self.refresh_scheduled_actions())
        self._update(is_loading=False)
        logger.info("Record guard started for %s", self._host.ids.record_id)

    def close(self) -> None:
        """Release subscriptions and stop timers. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._subscriptions.close()
        self._tracker.close()
        self._workflow.close()
        for task in self._tasks:
            task.cancel()
        self._listeners.clear()
        logger.info("Record guard closed for %s", self._host.ids.record_id)

    def subscribe(self, listener: SnapshotListener) -> Unsubscribe:
        """Call ``listener`` with every new snapshot."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Operations ---

    def trigger_validation(self) -> None:
        self._workflow.trigger()

    async def refresh_scheduled_actions(self) -> None:
        try:
            actions = await self._scheduling.list_scheduled()
        except RemoteCallError as e:
            logger.warning("Could not load scheduled actions: %s", e)
            return
        self._update(scheduled_actions=tuple(actions))

    async def open_schedule_dialog(self, existing: ScheduledAction | None = None) -> bool:
        """Open the schedule dialog; refresh the list when a schedule resulted."""
        params = ScheduleDialogParams(record_id=self._host.ids.record_id, action=existing)
        scheduled = await self._host.dialogs.open_schedule_dialog(params)
        if scheduled:
            await self.refresh_scheduled_actions()
        return scheduled

    async def cancel_scheduled_action(self, action: ScheduledAction) -> bool:
        try:
            return await self._scheduling.cancel(action, self._host.dialogs)
        finally:
            await self.refresh_scheduled_actions()

    # --- Host events ---

    def _on_plain_field_changed(self, value: Any) -> None:
        if not self._closed:
            self._workflow.trigger()

    def _on_sys_changed(self, meta: RecordMeta) -> None:
        if self._closed:
            return
        self._update(status=derive_status(meta), last_saved_at=meta.updated_at)
        self._spawn(self.refresh_scheduled_actions())
        self._workflow.trigger()
        self._tracker.request_revalidation()

    def refresh_snapshot(self) -> None:
        self._update()

    # --- Internals ---

    def _update(self, **changes: Any) -> None:
        if self._closed:
            return
        self._snapshot = replace(
            self._snapshot,
            invalid_references=self._tracker.invalid_references,
            validation_message=self._workflow.outcome.error_message,
            custom_field_errors=self._workflow.custom_field_errors,
            is_validating=self._tracker.is_validating or self._workflow.is_validating,
            **changes,
        )
        for listener in list(self._listeners):
            listener(self._snapshot)

    def _spawn(self, coro: Any) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Record guard task failed", exc_info=exc)


def create_record_guard(
    host: HostContext,
    remote: RemotePorts,
    rules: Rules,
    clock: ClockPort,
) -> RecordGuard:
    """Build a guard and its components from the loaded rules."""
    guard: RecordGuard | None = None

    def changed() -> None:
        if guard is not None:
            guard.refresh_snapshot()

    workflow = ValidationWorkflow(
        remote.validation,
        host.record,
        host.ids,
        editor_interface=remote.editor_interface,
        throttle_seconds=rules.validation.throttle_seconds,
        poll_interval_seconds=rules.validation.poll_interval_seconds,
        save_before_validate=rules.validation.save_before_validate,
        on_change=changed,
    )
    tracker = ReferenceTracker(
        remote.reads,
        unverified_policy=rules.references.unverified_policy,
        on_change=changed,
        on_field_changed=workflow.trigger,
    )
    scheduling = SchedulingService(
        remote.scheduled_actions,
        host.ids,
        clock,
        host.notifier,
        timezones=[TimezoneOption(label=tz.label, value=tz.value) for tz in rules.scheduling.timezones],
        jobs_url_template=rules.scheduling.jobs_url_template,
    )
    actions = RecordActions(
        remote.record_actions,
        host.record,
        host.ids,
        host.dialogs,
        host.notifier,
        editor_url_template=rules.scheduling.editor_url_template,
    )
    guard = RecordGuard(host, tracker, workflow, scheduling, actions)
    return guard
