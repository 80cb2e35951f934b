"""
Async client for the content management HTTP API.

One ``CmaClient`` per space/environment implements every remote port the
engine needs: record reads, bulk validation jobs, editor interfaces,
lifecycle actions and (through ``scheduled_actions``) scheduled actions.

HTTP failures are mapped onto ``publish_protect.core.errors``:
404 -> NotFoundError, 409 -> VersionMismatchError, any other non-2xx or
transport failure -> RemoteCallError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from publish_protect.components.guard import RemotePorts
from publish_protect.components.validation import JobResult
from publish_protect.core.errors import NotFoundError, RemoteCallError, VersionMismatchError
from publish_protect.domain.entities import RecordMeta, TargetKind

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/vnd.contentful.management.v1+json"
VERSION_HEADER = "X-Contentful-Version"

_COLLECTIONS: dict[TargetKind, str] = {"Entry": "entries", "Asset": "assets"}


def _entry_link(record_id: str) -> dict[str, Any]:
    return {"sys": {"type": "Link", "linkType": "Entry", "id": record_id}}


class CmaClient:
    """Remote API of one space environment."""

    def __init__(self, http: httpx.AsyncClient, space: str, environment: str) -> None:
        self._http = http
        self.space = space
        self.environment = environment
        self.scheduled_actions = CmaScheduledActions(self)

    @classmethod
    def create(
        cls,
        base_url: str,
        token: str,
        space: str,
        environment: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> CmaClient:
        http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}", "Content-Type": CONTENT_TYPE},
            timeout=timeout_seconds,
            transport=transport,
        )
        return cls(http, space, environment)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> CmaClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def ports(self) -> RemotePorts:
        return RemotePorts(
            reads=self,
            validation=self,
            editor_interface=self,
            scheduled_actions=self.scheduled_actions,
            record_actions=self,
        )

    # --- Transport ---

    @property
    def env_path(self) -> str:
        return f"/spaces/{self.space}/environments/{self.environment}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        resource: str,
        resource_id: str = "",
        version: int | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Send one request and return the decoded JSON body ({} when empty)."""
        headers = {VERSION_HEADER: str(version)} if version is not None else None
        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteCallError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(resource, resource_id)
        if response.status_code == 409:
            raise VersionMismatchError(resource_id, version or 0)
        if response.is_error:
            raise RemoteCallError(_error_message(response), status_code=response.status_code)

        logger.debug("%s %s -> %d", method, path, response.status_code)
        if not response.content:
            return {}
        return response.json()

    # --- Record reads ---

    async def get_record_meta(self, target_id: str, kind: TargetKind) -> RecordMeta:
        data = await self.request(
            "GET",
            f"{self.env_path}/{_COLLECTIONS[kind]}/{target_id}",
            resource=kind,
            resource_id=target_id,
        )
        return RecordMeta.from_sys(data["sys"])

    async def find_referrers(self, record_id: str) -> list[str]:
        data = await self.request(
            "GET",
            f"{self.env_path}/entries",
            params={"links_to_entry": record_id},
            resource="Entry",
            resource_id=record_id,
        )
        return [item["sys"]["id"] for item in data.get("items", [])]

    # --- Validation jobs ---

    async def create_job(self, record_id: str) -> str:
        data = await self.request(
            "POST",
            f"{self.env_path}/bulk_actions/validate",
            json={"entities": {"sys": {"type": "Array"}, "items": [_entry_link(record_id)]}},
            resource="Entry",
            resource_id=record_id,
        )
        return data["sys"]["id"]

    async def get_job(self, job_id: str) -> JobResult:
        data = await self.request(
            "GET",
            f"{self.env_path}/bulk_actions/actions/{job_id}",
            resource="BulkAction",
            resource_id=job_id,
        )
        error = data.get("error") or {}
        return JobResult(status=data["sys"]["status"], error_message=error.get("message"))

    # --- Editor interface ---

    async def get_controls(self, content_type_id: str) -> list[dict[str, Any]]:
        data = await self.request(
            "GET",
            f"{self.env_path}/content_types/{content_type_id}/editor_interface",
            resource="EditorInterface",
            resource_id=content_type_id,
        )
        return data.get("controls", [])

    # --- Lifecycle actions ---

    async def publish(self, record_id: str, version: int) -> None:
        await self.request(
            "PUT",
            f"{self.env_path}/entries/{record_id}/published",
            version=version,
            resource="Entry",
            resource_id=record_id,
        )

    async def unpublish(self, record_id: str) -> None:
        await self.request(
            "DELETE",
            f"{self.env_path}/entries/{record_id}/published",
            resource="Entry",
            resource_id=record_id,
        )

    async def archive(self, record_id: str) -> None:
        await self.request(
            "PUT",
            f"{self.env_path}/entries/{record_id}/archived",
            resource="Entry",
            resource_id=record_id,
        )

    async def unarchive(self, record_id: str) -> None:
        await self.request(
            "DELETE",
            f"{self.env_path}/entries/{record_id}/archived",
            resource="Entry",
            resource_id=record_id,
        )


class CmaScheduledActions:
    """Scheduled-actions endpoints; these live at space level."""

    def __init__(self, client: CmaClient) -> None:
        self._client = client

    @property
    def _path(self) -> str:
        return f"/spaces/{self._client.space}/scheduled_actions"

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._client.request(
            "POST", self._path, json=payload, resource="ScheduledAction"
        )

    async def update(
        self,
        action_id: str,
        version: int,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        return await self._client.request(
            "PUT",
            f"{self._path}/{action_id}",
            json=payload,
            version=version,
            resource="ScheduledAction",
            resource_id=action_id,
        )

    async def list(self, record_id: str, environment_id: str) -> list[dict[str, Any]]:
        data = await self._client.request(
            "GET",
            self._path,
            params={"entity.sys.id": record_id, "environment.sys.id": environment_id},
            resource="ScheduledAction",
        )
        return data.get("items", [])

    async def delete(self, action_id: str, environment_id: str) -> None:
        await self._client.request(
            "DELETE",
            f"{self._path}/{action_id}",
            params={"environment.sys.id": environment_id},
            resource="ScheduledAction",
            resource_id=action_id,
        )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"
