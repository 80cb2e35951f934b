"""
Record actions - publish, unpublish and archive the record being edited.

Thin pass-through to the remote API with two guards:
- unpublish and archive are refused, with an alert listing the referring
  entries, while any other entry links to this one;
- archive asks for confirmation and unpublishes a live record first.

Remote failures are shown as an error notification with the API message.
"""

from __future__ import annotations

import logging

from publish_protect.core.errors import RemoteCallError
from publish_protect.core.ports.host import ConfirmPort, HostIds, NotifierPort, RecordPort
from publish_protect.domain.entities import LifecycleStatus
from publish_protect.domain.status import derive_status

from .models import (
    DEFAULT_EDITOR_URL_TEMPLATE,
    LIVE_STATUSES,
    PUBLISH_BUTTON_LABELS,
    ActionOutcome,
)
from .ports import RecordActionsApiPort

logger = logging.getLogger(__name__)


def publish_button_label(status: LifecycleStatus) -> str:
    return PUBLISH_BUTTON_LABELS[status]


def is_publish_disabled(status: LifecycleStatus, is_invalid: bool) -> bool:
    """Published and archived records can always change status."""
    if status in ("published", "archived"):
        return False
    return is_invalid


def referrers_message(urls: list[str]) -> str:
    return (
        "This entry must have all references to it removed from the following entries:\n"
        + "\n".join(urls)
    )


class RecordActions:
    """Lifecycle actions for one record."""

    def __init__(
        self,
        api: RecordActionsApiPort,
        record: RecordPort,
        ids: HostIds,
        dialogs: ConfirmPort,
        notifier: NotifierPort,
        *,
        editor_url_template: str = DEFAULT_EDITOR_URL_TEMPLATE,
    ) -> None:
        self._api = api
        self._record = record
        self._ids = ids
        self._dialogs = dialogs
        self._notifier = notifier
        self._editor_url_template = editor_url_template

    def editor_url(self, record_id: str) -> str:
        return self._editor_url_template.format(
            space=self._ids.space,
            environment=self._ids.environment,
            record_id=record_id,
        )

    def _status(self) -> LifecycleStatus:
        return derive_status(self._record.get_sys())

    # --- Actions ---

    async def publish(self) -> ActionOutcome:
        """Publish, or unarchive when the record is archived."""
        try:
            if self._status() == "archived":
                await self._api.unarchive(self._ids.record_id)
                self._notifier.success("Entry unarchived")
                return ActionOutcome(action="unarchive", performed=True)
            await self._api.publish(self._ids.record_id, self._record.get_sys().version)
            self._notifier.success("Entry published")
            return ActionOutcome(action="publish", performed=True)
        except RemoteCallError as e:
            return self._failed(e)

    async def unpublish(self) -> ActionOutcome:
        """Unpublish (publish when archived) unless other entries link here."""
        try:
            if self._status() == "archived":
                await self._api.publish(self._ids.record_id, self._record.get_sys().version)
                self._notifier.success("Entry published")
                return ActionOutcome(action="publish", performed=True)

            referrers = await self._api.find_referrers(self._ids.record_id)
            if referrers:
                await self._alert_referrers("Unable to unpublish entry", referrers)
                return ActionOutcome(action="unpublish", performed=False, blocked_by=tuple(referrers))

            await self._api.unpublish(self._ids.record_id)
            self._notifier.warning("Entry unpublished")
            return ActionOutcome(action="unpublish", performed=True)
        except RemoteCallError as e:
            return self._failed(e)

    async def archive(self) -> ActionOutcome:
        """Archive after confirmation unless other entries link here."""
        try:
            referrers = await self._api.find_referrers(self._ids.record_id)
            if referrers:
                await self._alert_referrers("Unable to archive entry", referrers)
                return ActionOutcome(action="archive", performed=False, blocked_by=tuple(referrers))

            confirmed = await self._dialogs.confirm(
                "Are you sure?",
                "This will impact any entries referencing this one",
                "Yes, archive entry",
            )
            if not confirmed:
                return ActionOutcome(action="archive", performed=False)

            if self._status() in LIVE_STATUSES:
                await self._api.unpublish(self._ids.record_id)
            await self._api.archive(self._ids.record_id)
            self._notifier.success("Entry archived")
            return ActionOutcome(action="archive", performed=True)
        except RemoteCallError as e:
            return self._failed(e)

    # --- Internals ---

    async def _alert_referrers(self, title: str, referrers: list[str]) -> None:
        logger.info("%s: %d entries link to %s", title, len(referrers), self._ids.record_id)
        urls = [self.editor_url(record_id) for record_id in referrers]
        await self._dialogs.alert(title, referrers_message(urls), "Close")

    def _failed(self, error: RemoteCallError) -> ActionOutcome:
        logger.warning("Record action on %s failed: %s", self._ids.record_id, error)
        self._notifier.error(str(error))
        return ActionOutcome(action=None, performed=False, error=str(error))
