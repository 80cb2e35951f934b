"""
Record guard unit tests.

Tests for the combined snapshot and the routing of host events.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from publish_protect.components.guard import GuardSnapshot, RecordGuard, RemotePorts, create_record_guard
from publish_protect.components.references import InvalidReference, LinkReference
from publish_protect.components.validation import CustomFieldError, JobResult
from publish_protect.core.errors import NotFoundError, RemoteCallError
from publish_protect.core.ports.host import HostContext, HostIds
from publish_protect.domain.entities import RecordMeta, ScheduledAction, TargetKind
from publish_protect.rules.models import Rules, ValidationRules

# --- Mocks ---


def link(target_id: str) -> dict[str, Any]:
    return {"sys": {"type": "Link", "linkType": "Entry", "id": target_id}}


class MockField:
    def __init__(
        self,
        field_id: str,
        name: str,
        field_type: str = "Symbol",
        items_type: str | None = None,
        value: Any = None,
    ) -> None:
        self.id = field_id
        self.name = name
        self.type = field_type
        self.items_type = items_type
        self.value = value
        self.listeners: list[Callable[[Any], None]] = []

    def get_value(self) -> Any:
        return self.value

    def on_value_changed(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        self.listeners.append(callback)
        return lambda: self.listeners.remove(callback)

    def set_value(self, value: Any) -> None:
        self.value = value
        for listener in list(self.listeners):
            listener(value)


class MockRecord:
    def __init__(self, meta: RecordMeta) -> None:
        self.meta = meta
        self.fields = {
            "title": MockField("title", "Title", value="Hello"),
            "hero": MockField("hero", "Hero", "Link", value=link("published-entry")),
        }
        self.sys_listeners: list[Callable[[RecordMeta], None]] = []
        self.saves = 0

    def get_sys(self) -> RecordMeta:
        return self.meta

    def on_sys_changed(self, callback: Callable[[RecordMeta], None]) -> Callable[[], None]:
        self.sys_listeners.append(callback)
        return lambda: self.sys_listeners.remove(callback)

    def set_sys(self, meta: RecordMeta) -> None:
        self.meta = meta
        for listener in list(self.sys_listeners):
            listener(meta)

    async def save(self) -> None:
        self.saves += 1


class MockRemote:
    """One object standing in for every remote API except scheduled actions."""

    def __init__(self) -> None:
        self.records: dict[str, RecordMeta] = {
            "published-entry": RecordMeta(version=2, published_version=1),
        }
        self.jobs_created = 0
        self.job_results: dict[str, JobResult] = {}
        self.controls: list[dict[str, Any]] = []

    async def get_record_meta(self, target_id: str, kind: TargetKind) -> RecordMeta:
        if target_id not in self.records:
            raise NotFoundError(kind, target_id)
        return self.records[target_id]

    async def create_job(self, record_id: str) -> str:
        self.jobs_created += 1
        return f"job-{self.jobs_created}"

    async def get_job(self, job_id: str) -> JobResult:
        return self.job_results.get(job_id, JobResult(status="succeeded"))

    async def get_controls(self, content_type_id: str) -> list[dict[str, Any]]:
        return self.controls

    async def publish(self, record_id: str, version: int) -> None:
        pass

    async def unpublish(self, record_id: str) -> None:
        pass

    async def archive(self, record_id: str) -> None:
        pass

    async def unarchive(self, record_id: str) -> None:
        pass

    async def find_referrers(self, record_id: str) -> list[str]:
        return []


class MockScheduledActionsApi:
    def __init__(self) -> None:
        self.resources: list[dict[str, Any]] = []
        self.list_calls = 0
        self.deleted: list[str] = []
        self.list_error: Exception | None = None

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        return payload

    async def update(self, action_id: str, version: int, payload: dict[str, Any]) -> dict[str, Any]:
        return payload

    async def list(self, record_id: str, environment_id: str) -> list[dict[str, Any]]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return self.resources

    async def delete(self, action_id: str, environment_id: str) -> None:
        self.deleted.append(action_id)


class MockNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def success(self, message: str) -> None:
        self.messages.append(message)

    def warning(self, message: str) -> None:
        self.messages.append(message)

    def error(self, message: str) -> None:
        self.messages.append(message)


class MockDialogs:
    def __init__(self) -> None:
        self.schedule_result = True
        self.opened: list[Any] = []

    async def open_schedule_dialog(self, params: Any) -> bool:
        self.opened.append(params)
        return self.schedule_result

    async def confirm(
        self,
        title: str,
        message: str,
        confirm_label: str,
        cancel_label: str | None = None,
    ) -> bool:
        return True

    async def alert(self, title: str, message: str, confirm_label: str) -> None:
        pass


class FixedClock:
    def now_utc(self) -> datetime:
        return datetime(2024, 3, 15, 14, 5, tzinfo=UTC)


SCHEDULED = {
    "sys": {"id": "action-1", "version": 1, "status": "scheduled"},
    "action": "publish",
    "scheduledFor": {"datetime": "2024-03-20T10:00:00.000Z", "timezone": "UTC"},
}

RULES = Rules(validation=ValidationRules(throttle_ms=10, poll_interval_ms=60_000))


class Harness:
    def __init__(self, meta: RecordMeta | None = None) -> None:
        self.record = MockRecord(meta or RecordMeta(version=1))
        self.remote = MockRemote()
        self.scheduled = MockScheduledActionsApi()
        self.dialogs = MockDialogs()
        self.notifier = MockNotifier()
        self.host = HostContext(
            ids=HostIds(space="sp", environment="master", record_id="entry-1", content_type_id="post"),
            record=self.record,
            dialogs=self.dialogs,
            notifier=self.notifier,
        )
        ports = RemotePorts(
            reads=self.remote,
            validation=self.remote,
            editor_interface=self.remote,
            scheduled_actions=self.scheduled,
            record_actions=self.remote,
        )
        self.guard: RecordGuard = create_record_guard(self.host, ports, RULES, FixedClock())
        self.snapshots: list[GuardSnapshot] = []
        self.guard.subscribe(self.snapshots.append)


@pytest.fixture
def harness() -> Harness:
    return Harness()


# --- Snapshot ---


class TestGuardSnapshot:
    def test_loading_is_invalid(self) -> None:
        assert GuardSnapshot(status="draft").is_invalid

    def test_clean_snapshot_is_valid(self) -> None:
        snapshot = GuardSnapshot(status="draft", is_loading=False)
        assert not snapshot.is_invalid
        assert snapshot.validation_messages == []

    def test_messages_ordered(self) -> None:
        reference = InvalidReference(
            reference=LinkReference("hero", "Hero", "x", "Entry"),
            code="reference_unpublished",
            message="ref message",
        )
        snapshot = GuardSnapshot(
            status="draft",
            is_loading=False,
            invalid_references=(reference,),
            validation_message="job message",
            custom_field_errors=(CustomFieldError("body", "custom message"),),
        )

        assert snapshot.is_invalid
        assert snapshot.validation_messages == ["job message", "ref message", "custom message"]


# --- Guard ---


class TestRecordGuard:
    @pytest.mark.asyncio
    async def test_start_loads_everything(self, harness: Harness) -> None:
        harness.scheduled.resources = [SCHEDULED]
        harness.guard.start()
        await asyncio.sleep(0.01)

        snapshot = harness.guard.snapshot
        assert not snapshot.is_loading
        assert snapshot.status == "draft"
        assert snapshot.is_action_scheduled
        assert snapshot.scheduled_actions[0].id == "action-1"
        assert snapshot.invalid_references == ()
        harness.guard.close()

    @pytest.mark.asyncio
    async def test_plain_field_change_triggers_validation(self, harness: Harness) -> None:
        harness.guard.start()
        harness.record.fields["title"].set_value("A")
        harness.record.fields["title"].set_value("AB")
        await asyncio.sleep(0.05)

        assert harness.remote.jobs_created == 1
        assert harness.record.saves == 1
        harness.guard.close()

    @pytest.mark.asyncio
    async def test_link_field_change_revalidates_and_triggers(self, harness: Harness) -> None:
        harness.guard.start()
        await asyncio.sleep(0.01)

        harness.record.fields["hero"].set_value(link("deleted-entry"))
        await asyncio.sleep(0.05)

        snapshot = harness.guard.snapshot
        assert snapshot.is_invalid
        assert snapshot.validation_messages == [
            'The field "Hero" contains a reference to unpublished content'
        ]
        assert harness.remote.jobs_created == 1
        harness.guard.close()

    @pytest.mark.asyncio
    async def test_validation_error_surfaces(self, harness: Harness) -> None:
        harness.remote.job_results["job-1"] = JobResult(status="failed", error_message="Bad entry")
        harness.guard.start()

        harness.guard.trigger_validation()
        await asyncio.sleep(0.05)
        harness.guard.trigger_validation()
        await asyncio.sleep(0.05)

        assert harness.guard.snapshot.validation_message == "Bad entry"
        harness.guard.close()

    @pytest.mark.asyncio
    async def test_lifecycle_change(self, harness: Harness) -> None:
        harness.guard.start()
        await asyncio.sleep(0.01)
        lists_before = harness.scheduled.list_calls
        saved_at = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)

        harness.record.set_sys(RecordMeta(version=2, published_version=1, updated_at=saved_at))
        await asyncio.sleep(0.05)

        snapshot = harness.guard.snapshot
        assert snapshot.status == "published"
        assert snapshot.last_saved_at == saved_at
        assert harness.scheduled.list_calls == lists_before + 1
        assert harness.remote.jobs_created == 1
        harness.guard.close()

    @pytest.mark.asyncio
    async def test_schedule_list_failure_keeps_previous(self, harness: Harness) -> None:
        harness.scheduled.resources = [SCHEDULED]
        harness.guard.start()
        await asyncio.sleep(0.01)

        harness.scheduled.list_error = RemoteCallError("down", status_code=503)
        await harness.guard.refresh_scheduled_actions()

        assert len(harness.guard.snapshot.scheduled_actions) == 1
        harness.guard.close()

    @pytest.mark.asyncio
    async def test_close_releases_subscriptions(self, harness: Harness) -> None:
        harness.guard.start()
        harness.guard.close()

        assert harness.record.sys_listeners == []
        assert all(not f.listeners for f in harness.record.fields.values())

        count = len(harness.snapshots)
        await asyncio.sleep(0.05)
        assert len(harness.snapshots) == count
        assert harness.remote.jobs_created == 0

    @pytest.mark.asyncio
    async def test_open_schedule_dialog_refreshes_when_scheduled(self, harness: Harness) -> None:
        harness.guard.start()
        await asyncio.sleep(0.01)
        lists_before = harness.scheduled.list_calls

        existing = ScheduledAction.from_api(SCHEDULED)
        assert await harness.guard.open_schedule_dialog(existing)

        assert harness.dialogs.opened[0].action == existing
        assert harness.dialogs.opened[0].record_id == "entry-1"
        assert harness.scheduled.list_calls == lists_before + 1

        harness.dialogs.schedule_result = False
        assert not await harness.guard.open_schedule_dialog()
        assert harness.scheduled.list_calls == lists_before + 1
        harness.guard.close()

    @pytest.mark.asyncio
    async def test_cancel_always_refreshes(self, harness: Harness) -> None:
        harness.guard.start()
        await asyncio.sleep(0.01)
        lists_before = harness.scheduled.list_calls

        assert await harness.guard.cancel_scheduled_action(ScheduledAction.from_api(SCHEDULED))

        assert harness.scheduled.deleted == ["action-1"]
        assert harness.notifier.messages == ["Scheduled action canceled"]
        assert harness.scheduled.list_calls == lists_before + 1
        harness.guard.close()

    def test_factory_builds_record_actions(self, harness: Harness) -> None:
        assert harness.guard.actions is not None
        assert harness.guard.scheduling.default_timezone == "UTC"
