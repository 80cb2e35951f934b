"""
Half-hour time slots for scheduling.

Slots are 12-hour clock labels ("12:00 AM" ... "11:30 PM"). Every operation
here is pure; "now" is always passed in.
"""

from __future__ import annotations

from datetime import date, datetime

MERIDIEMS = ("AM", "PM")
FALLBACK_SLOT = "12:00 AM"


def _label(hour24: int, minute: int) -> str:
    hour12 = hour24 % 12 or 12
    return f"{hour12}:{minute:02d} {MERIDIEMS[hour24 // 12]}"


TIME_SLOTS: tuple[str, ...] = tuple(
    _label(hour, minute) for hour in range(24) for minute in (0, 30)
)


def _calendar_day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def is_same_day(a: date | datetime, b: date | datetime) -> bool:
    """Compare calendar dates only; time of day and offsets are ignored."""
    return _calendar_day(a) == _calendar_day(b)


def to_24_hour(slot: str) -> tuple[int, int]:
    """Convert an "H:MM AM/PM" label to an (hour, minute) pair."""
    clock, meridiem = slot.split(" ")
    hour_text, minute_text = clock.split(":")
    hour, minute = int(hour_text), int(minute_text)
    if meridiem == "AM" and hour == 12:
        return 0, minute
    if meridiem == "PM" and hour != 12:
        return hour + 12, minute
    return hour, minute


def slot_label_for(moment: datetime) -> str:
    """Label for the time of day of ``moment`` (not rounded to a slot)."""
    return _label(moment.hour, moment.minute)


def _slot_ceiling(now: datetime) -> tuple[int, int]:
    if now.minute == 0:
        return now.hour, 0
    if now.minute <= 30:
        return now.hour, 30
    return now.hour + 1, 0


def available_slots(selected_day: date | datetime, now: datetime) -> list[str]:
    """
    Slots that can still be picked on ``selected_day``.

    A day other than today offers every slot. Today offers only the slots
    strictly after ``now`` rounded up to the next half-hour mark.
    """
    if not is_same_day(selected_day, now):
        return list(TIME_SLOTS)
    ceiling = _slot_ceiling(now)
    return [slot for slot in TIME_SLOTS if to_24_hour(slot) > ceiling]


def parse_free_text_time(text: str) -> str | None:
    """
    Parse a typed time such as "9:30 pm" into its canonical label.

    Returns None when the text has no AM/PM marker, the hour is outside
    1-12 or the minute is not two digits in 0-59.
    """
    upper = text.upper()
    positions = [(upper.find(marker), marker) for marker in MERIDIEMS if marker in upper]
    if not positions:
        return None
    index, meridiem = min(positions)

    parts = upper[:index].strip().split(":")
    if len(parts) != 2:
        return None
    hour_text, minute_text = parts[0].strip(), parts[1].strip()
    if not hour_text.isdigit() or not minute_text.isdigit() or len(minute_text) != 2:
        return None

    hour, minute = int(hour_text), int(minute_text)
    if not 1 <= hour <= 12 or not 0 <= minute <= 59:
        return None
    return f"{hour}:{minute:02d} {meridiem}"


def default_slot(now: datetime) -> str:
    """Safe default: skip the boundary slot and take the next one today."""
    slots = available_slots(now, now)
    if len(slots) > 1:
        return slots[1]
    if slots:
        return slots[0]
    return FALLBACK_SLOT


def resolve_free_text_time(text: str, now: datetime) -> str:
    """Parsed label, or the safe default when the text cannot be parsed."""
    parsed = parse_free_text_time(text)
    return parsed if parsed is not None else default_slot(now)


def is_valid_time(selected_day: date | datetime, slot: str, now: datetime) -> bool:
    """True for any other day; today the slot must be strictly after now."""
    if not is_same_day(selected_day, now):
        return True
    return to_24_hour(slot) > (now.hour, now.minute)
