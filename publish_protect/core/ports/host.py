"""
Host collaborator ports.

The host owns the record being edited: its fields, its lifecycle metadata,
and the presentation surfaces (notifications and dialogs). Every component
receives these explicitly instead of reading ambient host state.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from publish_protect.domain.entities import RecordMeta

Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class HostIds:
    """Identifiers of the record and the space/environment it lives in."""

    space: str
    environment: str
    record_id: str
    content_type_id: str = ""
    environment_alias: str | None = None

    @property
    def effective_environment(self) -> str:
        """Alias when one is set, otherwise the environment id."""
        return self.environment_alias or self.environment


class FieldPort(Protocol):
    """A single field of the record being edited."""

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def type(self) -> str:
        """Declared field type, e.g. ``Symbol``, ``Link`` or ``Array``."""
        ...

    @property
    def items_type(self) -> str | None:
        """Declared type of array items, ``None`` for non-array fields."""
        ...

    def get_value(self) -> Any:
        """Return the current value."""
        ...

    def on_value_changed(self, callback: Callable[[Any], None]) -> Unsubscribe:
        """Register a value-change listener. Returns its release handle."""
        ...


class RecordPort(Protocol):
    """The record being edited."""

    @property
    def fields(self) -> Mapping[str, FieldPort]: ...

    def get_sys(self) -> RecordMeta:
        """Return the current lifecycle metadata snapshot."""
        ...

    def on_sys_changed(self, callback: Callable[[RecordMeta], None]) -> Unsubscribe:
        """Register a lifecycle-change listener. Returns its release handle."""
        ...

    async def save(self) -> None:
        """Persist pending edits."""
        ...


class NotifierPort(Protocol):
    """Transient notifications shown to the editor."""

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class ConfirmPort(Protocol):
    """Confirmation and alert prompts."""

    async def confirm(
        self,
        title: str,
        message: str,
        confirm_label: str,
        cancel_label: str | None = None,
    ) -> bool: ...

    async def alert(self, title: str, message: str, confirm_label: str) -> None: ...


class DialogPort(ConfirmPort, Protocol):
    """Modal dialogs opened from the record view."""

    async def open_schedule_dialog(self, params: Any) -> bool:
        """Open the schedule dialog. Returns True when a schedule resulted."""
        ...


class InteractionPort(Protocol):
    """The dialog an operation was started from."""

    def close(self, result: bool) -> None: ...


@dataclass(frozen=True)
class HostContext:
    """Explicit context handed to every per-record component."""

    ids: HostIds
    record: RecordPort
    dialogs: DialogPort
    notifier: NotifierPort
