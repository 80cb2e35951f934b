"""Validation component - job-based remote validation of a record."""

from publish_protect.components.validation.component import (
    ValidationWorkflow,
    custom_field_message,
    find_custom_field_errors,
)
from publish_protect.components.validation.models import (
    CustomFieldError,
    JobResult,
    ValidationJob,
    ValidationOutcome,
    WorkflowState,
)
from publish_protect.components.validation.ports import (
    EditorInterfacePort,
    ValidationApiPort,
)

__all__ = [
    # Workflow
    "ValidationWorkflow",
    "custom_field_message",
    "find_custom_field_errors",
    # Models
    "CustomFieldError",
    "JobResult",
    "ValidationJob",
    "ValidationOutcome",
    "WorkflowState",
    # Ports
    "EditorInterfacePort",
    "ValidationApiPort",
]
