"""Errors raised by remote collaborator adapters."""

from __future__ import annotations


class RemoteCallError(Exception):
    """Base class for failed calls against a remote API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(RemoteCallError):
    """Raised when the requested resource does not exist or has been deleted."""

    def __init__(self, resource: str, resource_id: str) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found: {resource_id}", status_code=404)


class VersionMismatchError(RemoteCallError):
    """Raised when an optimistic-concurrency version no longer matches."""

    def __init__(self, resource_id: str, version: int) -> None:
        self.resource_id = resource_id
        self.version = version
        super().__init__(
            f"Version {version} of {resource_id} is outdated", status_code=409
        )
