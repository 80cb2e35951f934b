"""Remote validation workflow models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Host editor-interface setting listing record ids a custom field flagged
INVALID_SETTINGS_KEY = "__invalid"

# Remote job statuses that mean the job has not finished yet
UNFINISHED_JOB_STATUSES = ("created", "inProgress")


class WorkflowState(Enum):
    """Validation workflow state."""

    IDLE = "idle"  # no job outstanding
    PENDING = "pending"  # a remote job is outstanding


@dataclass(frozen=True)
class ValidationJob:
    """The outstanding remote job, if any."""

    id: str | None = None

    @property
    def is_outstanding(self) -> bool:
        return self.id is not None


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of the last resolved job."""

    error_message: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.error_message is None


@dataclass(frozen=True)
class JobResult:
    """A remote job as reported by the validation API."""

    status: str
    error_message: str | None = None

    @property
    def is_finished(self) -> bool:
        return self.status not in UNFINISHED_JOB_STATUSES


@dataclass(frozen=True)
class CustomFieldError:
    """A field flagged invalid by a custom field editor."""

    field_id: str
    message: str
