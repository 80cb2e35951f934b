"""
Content management API adapter tests.

Requests are answered by an ``httpx.MockTransport``; no network access.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from publish_protect.adapters.cma_client import CmaClient
from publish_protect.core.errors import NotFoundError, RemoteCallError, VersionMismatchError

Handler = Callable[[httpx.Request], httpx.Response]


class Recorder:
    """Mock transport handler recording requests and replying from a table."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"message": "The resource could not be found."})
        return self.routes[key]


def make_client(handler: Handler) -> CmaClient:
    return CmaClient.create(
        base_url="https://cma.test",
        token="secret",
        space="sp",
        environment="master",
        transport=httpx.MockTransport(handler),
    )


ENV = "/spaces/sp/environments/master"


class TestRecordReads:
    @pytest.mark.asyncio
    async def test_entry_meta(self) -> None:
        recorder = Recorder(
            {
                ("GET", f"{ENV}/entries/e1"): httpx.Response(
                    200, json={"sys": {"id": "e1", "version": 4, "publishedVersion": 3}}
                )
            }
        )
        async with make_client(recorder) as client:
            meta = await client.get_record_meta("e1", "Entry")

        assert meta.version == 4
        assert meta.published_version == 3
        assert recorder.requests[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_asset_uses_assets_collection(self) -> None:
        recorder = Recorder(
            {("GET", f"{ENV}/assets/a1"): httpx.Response(200, json={"sys": {"version": 1}})}
        )
        async with make_client(recorder) as client:
            meta = await client.get_record_meta("a1", "Asset")
        assert meta.published_version is None

    @pytest.mark.asyncio
    async def test_missing_record_raises_not_found(self) -> None:
        async with make_client(Recorder({})) as client:
            with pytest.raises(NotFoundError):
                await client.get_record_meta("gone", "Entry")

    @pytest.mark.asyncio
    async def test_server_error_raises_remote_call_error(self) -> None:
        recorder = Recorder(
            {("GET", f"{ENV}/entries/e1"): httpx.Response(500, json={"message": "Internal"})}
        )
        async with make_client(recorder) as client:
            with pytest.raises(RemoteCallError) as exc_info:
                await client.get_record_meta("e1", "Entry")

        assert not isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.status_code == 500
        assert str(exc_info.value) == "Internal"

    @pytest.mark.asyncio
    async def test_transport_error_raises_remote_call_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(RemoteCallError):
                await client.get_record_meta("e1", "Entry")

    @pytest.mark.asyncio
    async def test_referrers(self) -> None:
        recorder = Recorder(
            {
                ("GET", f"{ENV}/entries"): httpx.Response(
                    200, json={"total": 2, "items": [{"sys": {"id": "p1"}}, {"sys": {"id": "p2"}}]}
                )
            }
        )
        async with make_client(recorder) as client:
            referrers = await client.find_referrers("e1")

        assert referrers == ["p1", "p2"]
        assert recorder.requests[0].url.params["links_to_entry"] == "e1"


class TestValidationJobs:
    @pytest.mark.asyncio
    async def test_create_job(self) -> None:
        recorder = Recorder(
            {
                ("POST", f"{ENV}/bulk_actions/validate"): httpx.Response(
                    201, json={"sys": {"id": "bulk-1", "status": "created"}}
                )
            }
        )
        async with make_client(recorder) as client:
            job_id = await client.create_job("e1")

        assert job_id == "bulk-1"
        body = json.loads(recorder.requests[0].content)
        assert body["entities"]["items"] == [{"sys": {"type": "Link", "linkType": "Entry", "id": "e1"}}]

    @pytest.mark.asyncio
    async def test_failed_job_carries_message(self) -> None:
        recorder = Recorder(
            {
                ("GET", f"{ENV}/bulk_actions/actions/bulk-1"): httpx.Response(
                    200,
                    json={"sys": {"status": "failed"}, "error": {"message": "Entry has errors"}},
                )
            }
        )
        async with make_client(recorder) as client:
            result = await client.get_job("bulk-1")

        assert result.is_finished
        assert result.error_message == "Entry has errors"

    @pytest.mark.asyncio
    async def test_in_progress_job(self) -> None:
        recorder = Recorder(
            {
                ("GET", f"{ENV}/bulk_actions/actions/bulk-1"): httpx.Response(
                    200, json={"sys": {"status": "inProgress"}}
                )
            }
        )
        async with make_client(recorder) as client:
            result = await client.get_job("bulk-1")
        assert not result.is_finished

    @pytest.mark.asyncio
    async def test_editor_interface_controls(self) -> None:
        controls = [{"fieldId": "title", "settings": {"__invalid": "e1"}}]
        recorder = Recorder(
            {
                ("GET", f"{ENV}/content_types/post/editor_interface"): httpx.Response(
                    200, json={"controls": controls}
                )
            }
        )
        async with make_client(recorder) as client:
            assert await client.get_controls("post") == controls


class TestLifecycleActions:
    @pytest.mark.asyncio
    async def test_publish_sends_version_header(self) -> None:
        recorder = Recorder({("PUT", f"{ENV}/entries/e1/published"): httpx.Response(200, json={})})
        async with make_client(recorder) as client:
            await client.publish("e1", 7)
        assert recorder.requests[0].headers["X-Contentful-Version"] == "7"

    @pytest.mark.asyncio
    async def test_unpublish_and_archive(self) -> None:
        recorder = Recorder(
            {
                ("DELETE", f"{ENV}/entries/e1/published"): httpx.Response(200, json={}),
                ("PUT", f"{ENV}/entries/e1/archived"): httpx.Response(200, json={}),
                ("DELETE", f"{ENV}/entries/e1/archived"): httpx.Response(200, json={}),
            }
        )
        async with make_client(recorder) as client:
            await client.unpublish("e1")
            await client.archive("e1")
            await client.unarchive("e1")

        assert [r.method for r in recorder.requests] == ["DELETE", "PUT", "DELETE"]


class TestScheduledActions:
    @pytest.mark.asyncio
    async def test_list_filters_by_record_and_environment(self) -> None:
        recorder = Recorder(
            {("GET", "/spaces/sp/scheduled_actions"): httpx.Response(200, json={"items": []})}
        )
        async with make_client(recorder) as client:
            await client.scheduled_actions.list("e1", "master")

        params = recorder.requests[0].url.params
        assert params["entity.sys.id"] == "e1"
        assert params["environment.sys.id"] == "master"

    @pytest.mark.asyncio
    async def test_update_conflict_raises_version_mismatch(self) -> None:
        recorder = Recorder(
            {("PUT", "/spaces/sp/scheduled_actions/a1"): httpx.Response(409, json={})}
        )
        async with make_client(recorder) as client:
            with pytest.raises(VersionMismatchError):
                await client.scheduled_actions.update("a1", 2, {"action": "publish"})

        assert recorder.requests[0].headers["X-Contentful-Version"] == "2"

    @pytest.mark.asyncio
    async def test_delete_empty_body(self) -> None:
        recorder = Recorder(
            {("DELETE", "/spaces/sp/scheduled_actions/a1"): httpx.Response(204)}
        )
        async with make_client(recorder) as client:
            await client.scheduled_actions.delete("a1", "master")

    def test_ports_bundle(self) -> None:
        client = make_client(Recorder({}))
        ports = client.ports()
        assert ports.reads is client
        assert ports.scheduled_actions is client.scheduled_actions
