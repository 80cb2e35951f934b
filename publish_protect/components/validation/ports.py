"""Remote validation workflow port definitions."""

from __future__ import annotations

from typing import Any, Protocol

from .models import JobResult


class ValidationApiPort(Protocol):
    """Remote job-based validation API."""

    async def create_job(self, record_id: str) -> str:
        """Request validation of a record. Returns the new job id."""
        ...

    async def get_job(self, job_id: str) -> JobResult:
        """Fetch the current state of a job."""
        ...


class EditorInterfacePort(Protocol):
    """Read access to the editor interface of a content type."""

    async def get_controls(self, content_type_id: str) -> list[dict[str, Any]]:
        """Return the field controls (``fieldId`` plus ``settings``)."""
        ...
