"""
Schedule dialog API routes.

Backs the schedule dialog: slot lists, free-text time parsing, validity
checks and create/update/cancel of scheduled actions.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from publish_protect.adapters.http_host import CollectingNotifier, PreconfirmedDialogs
from publish_protect.api.deps import SchedulingFactory, get_clock, get_scheduling_factory
from publish_protect.components.scheduling import (
    ClockPort,
    ScheduleForm,
    available_slots,
    default_slot,
    is_valid_time,
    local_now,
    parse_free_text_time,
    resolve_free_text_time,
)
from publish_protect.core.errors import NotFoundError, RemoteCallError
from publish_protect.domain.entities import ActionKind, ScheduledAction

router = APIRouter()

DEFAULT_TIMEZONE = "UTC"


# --- Request/Response Models ---


class SlotsResponse(BaseModel):
    day: date
    slots: list[str]
    default_slot: str


class ParseTimeRequest(BaseModel):
    text: str
    timezone: str = DEFAULT_TIMEZONE


class ParseTimeResponse(BaseModel):
    slot: str
    parsed: bool = Field(..., description="False when the default slot was substituted")


class ValidityRequest(BaseModel):
    day: date
    slot: str
    timezone: str = DEFAULT_TIMEZONE


class ValidityResponse(BaseModel):
    valid: bool


class ScheduledActionResponse(BaseModel):
    id: str
    action_kind: ActionKind
    scheduled_for: datetime
    timezone: str | None = None
    version: int


class ScheduleRequest(BaseModel):
    record_id: str
    action_kind: ActionKind = "publish"
    day: date
    slot: str
    timezone: str
    action_id: str | None = None
    version: int = 1


class ScheduleResponse(BaseModel):
    scheduled: bool
    messages: list[dict[str, str]] = Field(default_factory=list)


class CancelResponse(BaseModel):
    canceled: bool
    messages: list[dict[str, str]] = Field(default_factory=list)


# --- Helpers ---


def action_to_response(action: ScheduledAction) -> ScheduledActionResponse:
    return ScheduledActionResponse(
        id=action.id,
        action_kind=action.action_kind,
        scheduled_for=action.scheduled_for,
        timezone=action.timezone,
        version=action.version,
    )


def _wall_now(clock: ClockPort, timezone: str) -> datetime:
    try:
        return local_now(clock.now_utc(), timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"Unknown timezone: {timezone}") from e


def _serialize_errors(errors: Any) -> list[dict[str, Any]]:
    return [{"code": e.code, "message": e.message, "field": e.field} for e in errors]


# --- Routes ---


@router.get("/slots", response_model=SlotsResponse)
def list_slots(
    day: date | None = None,
    timezone: str = DEFAULT_TIMEZONE,
    clock: ClockPort = Depends(get_clock),
) -> Any:
    """Slots that can be picked on ``day`` (today in ``timezone`` when omitted)."""
    now = _wall_now(clock, timezone)
    selected = day or now.date()
    return SlotsResponse(
        day=selected,
        slots=available_slots(selected, now),
        default_slot=default_slot(now),
    )


@router.post("/parse-time", response_model=ParseTimeResponse)
def parse_time(request: ParseTimeRequest, clock: ClockPort = Depends(get_clock)) -> Any:
    """Parse typed text; unparseable input resolves to the default slot."""
    return ParseTimeResponse(
        slot=resolve_free_text_time(request.text, _wall_now(clock, request.timezone)),
        parsed=parse_free_text_time(request.text) is not None,
    )


@router.post("/validity", response_model=ValidityResponse)
def check_validity(request: ValidityRequest, clock: ClockPort = Depends(get_clock)) -> Any:
    now = _wall_now(clock, request.timezone)
    slot = parse_free_text_time(request.slot)
    if slot is None:
        return ValidityResponse(valid=False)
    return ValidityResponse(valid=is_valid_time(request.day, slot, now))


@router.get("/actions", response_model=list[ScheduledActionResponse])
async def list_actions(
    record_id: str,
    factory: SchedulingFactory = Depends(get_scheduling_factory),
) -> Any:
    service = factory(record_id, CollectingNotifier())
    try:
        actions = await service.list_scheduled()
    except RemoteCallError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
    return [action_to_response(a) for a in actions]


@router.post("/actions", response_model=ScheduleResponse)
async def schedule_action(
    request: ScheduleRequest,
    factory: SchedulingFactory = Depends(get_scheduling_factory),
) -> Any:
    """Create, or update when ``action_id`` is set, a scheduled action."""
    notifier = CollectingNotifier()
    service = factory(request.record_id, notifier)
    form = ScheduleForm(
        action_kind=request.action_kind,
        day=request.day,
        slot=request.slot,
        timezone=request.timezone,
        action_id=request.action_id,
        version=request.version,
    )

    output = await service.submit_form(form)
    if output.errors:
        raise HTTPException(
            status_code=422,
            detail=_serialize_errors(output.errors),
        )
    return ScheduleResponse(scheduled=output.scheduled, messages=notifier.messages)


@router.delete("/actions/{action_id}", response_model=CancelResponse)
async def cancel_action(
    action_id: str,
    record_id: str,
    factory: SchedulingFactory = Depends(get_scheduling_factory),
) -> Any:
    notifier = CollectingNotifier()
    service = factory(record_id, notifier)
    try:
        actions = await service.list_scheduled()
    except RemoteCallError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    action = next((a for a in actions if a.id == action_id), None)
    if action is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(NotFoundError("ScheduledAction", action_id)),
        )

    canceled = await service.cancel(action, PreconfirmedDialogs())
    return CancelResponse(canceled=canceled, messages=notifier.messages)
