"""
Reference tracker - watches link fields and revalidates their targets.

Every link or array-of-link field of the record is tracked. A change to one
field replaces only that field's entry and requests a revalidation pass.
A pass fetches every referenced record concurrently (no deduplication by
target) and replaces the invalid set wholesale.

Classification of a single reference:
- target not found or deleted: invalid
- target is draft or archived: invalid
- transient fetch failure: invalid as "unverified" under the ``block``
  policy, valid under ``ignore``
- otherwise valid
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from contextlib import ExitStack
from types import MappingProxyType
from typing import Any

from publish_protect.core.errors import NotFoundError, RemoteCallError
from publish_protect.core.ports.host import FieldPort
from publish_protect.domain.status import derive_status

from .models import (
    ARRAY_TYPE,
    LINK_TYPE,
    InvalidReference,
    LinkReference,
    TrackedFieldState,
    UnverifiedPolicy,
)
from .ports import RemoteReadPort

logger = logging.getLogger(__name__)

BLOCKING_TARGET_STATUSES = ("draft", "archived")


# --- Pure helpers ---


def is_link_field(field: FieldPort) -> bool:
    """True for link fields and arrays of links."""
    if field.type == LINK_TYPE:
        return True
    return field.type == ARRAY_TYPE and field.items_type == LINK_TYPE


def to_link_references(field: FieldPort, value: Any) -> tuple[LinkReference, ...]:
    """Convert a link field value (single link or list of links) to references."""
    if not value:
        return ()
    links = value if isinstance(value, list) else [value]
    return tuple(
        LinkReference(
            field_id=field.id,
            field_name=field.name,
            target_id=link["sys"]["id"],
            target_kind=link["sys"]["linkType"],
        )
        for link in links
    )


def unpublished_reference_message(field_name: str) -> str:
    return f'The field "{field_name}" contains a reference to unpublished content'


def unverified_reference_message(field_name: str) -> str:
    return f'The field "{field_name}" contains a reference that could not be verified'


async def check_reference(
    reference: LinkReference,
    remote: RemoteReadPort,
    unverified_policy: UnverifiedPolicy = "block",
) -> InvalidReference | None:
    """Classify one reference. Returns None when it is valid."""
    try:
        meta = await remote.get_record_meta(reference.target_id, reference.target_kind)
    except NotFoundError:
        return InvalidReference(
            reference=reference,
            code="reference_unpublished",
            message=unpublished_reference_message(reference.field_name),
        )
    except RemoteCallError as e:
        logger.warning(
            "Could not verify %s %s referenced by field %s: %s",
            reference.target_kind,
            reference.target_id,
            reference.field_id,
            e,
        )
        if unverified_policy == "ignore":
            return None
        return InvalidReference(
            reference=reference,
            code="reference_unverified",
            message=unverified_reference_message(reference.field_name),
        )

    if derive_status(meta) in BLOCKING_TARGET_STATUSES:
        return InvalidReference(
            reference=reference,
            code="reference_unpublished",
            message=unpublished_reference_message(reference.field_name),
        )
    return None


async def revalidate(
    state: TrackedFieldState,
    remote: RemoteReadPort,
    unverified_policy: UnverifiedPolicy = "block",
) -> tuple[InvalidReference, ...]:
    """Check every tracked reference concurrently and return the invalid ones."""
    references = [ref for refs in state.values() for ref in refs]
    results = await asyncio.gather(
        *(check_reference(ref, remote, unverified_policy) for ref in references)
    )
    return tuple(result for result in results if result is not None)


# --- Tracker ---


class ReferenceTracker:
    """
    Owns the tracked field state of one record and its current invalid set.

    ``on_change`` is called whenever the invalid set or the validating flag
    changes; ``on_field_changed`` whenever a tracked field's value changes.
    """

    def __init__(
        self,
        remote: RemoteReadPort,
        *,
        unverified_policy: UnverifiedPolicy = "block",
        on_change: Callable[[], None] | None = None,
        on_field_changed: Callable[[], None] | None = None,
    ) -> None:
        self._remote = remote
        self._unverified_policy = unverified_policy
        self._on_change = on_change
        self._on_field_changed = on_field_changed

        self._state: dict[str, tuple[LinkReference, ...]] = {}
        self._invalid: tuple[InvalidReference, ...] = ()
        self._subscriptions = ExitStack()
        self._tasks: set[asyncio.Task[Any]] = set()
        self._pass_seq = 0
        self._running_passes = 0
        self._closed = False

    # --- State ---

    @property
    def state(self) -> TrackedFieldState:
        return MappingProxyType(self._state)

    @property
    def invalid_references(self) -> tuple[InvalidReference, ...]:
        return self._invalid

    @property
    def is_validating(self) -> bool:
        return self._running_passes > 0

    # --- Lifecycle ---

    def initialize(self, fields: Mapping[str, FieldPort]) -> None:
        """
        Start tracking every link field in ``fields``.

        Safe to call again when the field set changes: previous
        subscriptions are released before new ones are made.
        """
        self._subscriptions.close()
        self._subscriptions = ExitStack()

        state: dict[str, tuple[LinkReference, ...]] = {}
        for field in fields.values():
            if not is_link_field(field):
                continue
            state[field.id] = to_link_references(field, field.get_value())
            unsubscribe = field.on_value_changed(self._make_listener(field))
            self._subscriptions.callback(unsubscribe)

        self._state = state
        self.request_revalidation()

    def close(self) -> None:
        """Release all field subscriptions and ignore in-flight passes."""
        self._closed = True
        self._subscriptions.close()

    # --- Revalidation ---

    def request_revalidation(self) -> None:
        """Schedule a revalidation pass on the running loop."""
        if self._closed:
            return
        task = asyncio.ensure_future(self.revalidate())
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    async def revalidate(self) -> tuple[InvalidReference, ...]:
        """
        Run one pass over the current state.

        The result is applied only when this is still the latest pass and
        the tracker has not been closed.
        """
        self._pass_seq += 1
        seq = self._pass_seq
        self._running_passes += 1
        self._notify()
        try:
            invalid = await revalidate(
                dict(self._state), self._remote, self._unverified_policy
            )
        finally:
            self._running_passes -= 1

        if self._closed:
            return invalid
        if seq == self._pass_seq:
            self._invalid = invalid
        self._notify()
        return invalid

    # --- Internals ---

    def _make_listener(self, field: FieldPort) -> Callable[[Any], None]:
        def listener(value: Any) -> None:
            if self._closed:
                return
            self._state = {**self._state, field.id: to_link_references(field, value)}
            if self._on_field_changed is not None:
                self._on_field_changed()
            self.request_revalidation()

        return listener

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Reference revalidation failed", exc_info=exc)

    def _notify(self) -> None:
        if self._on_change is not None and not self._closed:
            self._on_change()
