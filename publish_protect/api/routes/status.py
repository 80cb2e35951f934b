from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from publish_protect.components.record_actions import is_publish_disabled, publish_button_label
from publish_protect.domain.entities import LifecycleStatus, RecordMeta
from publish_protect.domain.status import derive_status

router = APIRouter()


class StatusRequest(BaseModel):
    version: int
    published_version: int | None = Field(default=None, alias="publishedVersion")
    archived_version: int | None = Field(default=None, alias="archivedVersion")
    is_invalid: bool = Field(default=False, alias="isInvalid")

    model_config = ConfigDict(populate_by_name=True)


class StatusResponse(BaseModel):
    status: LifecycleStatus
    publish_label: str
    publish_disabled: bool


@router.post("/status", response_model=StatusResponse)
def record_status(request: StatusRequest) -> Any:
    """Derive the lifecycle status from a record's version counters."""
    meta = RecordMeta(
        version=request.version,
        published_version=request.published_version,
        archived_version=request.archived_version,
    )
    derived = derive_status(meta)
    return StatusResponse(
        status=derived,
        publish_label=publish_button_label(derived),
        publish_disabled=is_publish_disabled(derived, request.is_invalid),
    )
