"""
Slot ledger helpers.

A ledger maps an ISO calendar date to the time strings already booked with a
doctor on that date. The helpers never mutate their input; they return a new
mapping so the ORM sees a fresh value and writes the JSON column.
"""

from datetime import date
from typing import Dict, List, Optional

from healthbridge.core.exceptions import SlotTakenError, ValidationError

SlotLedger = Dict[str, List[str]]

MAX_SLOT_TIME_LENGTH = 32


def normalize_slot_date(value: str) -> str:
    """Return the canonical ISO form of a slot date"""
    try:
        return date.fromisoformat(str(value).strip()).isoformat()
    except ValueError:
        raise ValidationError(f"Invalid slot date: {value!r}", error_code="INVALID_SLOT_DATE")


def normalize_slot_time(value: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValidationError("Slot time is required", error_code="INVALID_SLOT_TIME")
    if len(text) > MAX_SLOT_TIME_LENGTH:
        raise ValidationError(
            f"Slot time must be at most {MAX_SLOT_TIME_LENGTH} characters", error_code="INVALID_SLOT_TIME"
        )
    return text


def booked_times(ledger: Optional[SlotLedger], slot_date: str) -> List[str]:
    return list((ledger or {}).get(slot_date, []))


def is_booked(ledger: Optional[SlotLedger], slot_date: str, slot_time: str) -> bool:
    return slot_time in booked_times(ledger, slot_date)


def add_slot(ledger: Optional[SlotLedger], slot_date: str, slot_time: str) -> SlotLedger:
    """Return a copy of the ledger with the slot booked; SlotTakenError if it already is"""
    if is_booked(ledger, slot_date, slot_time):
        raise SlotTakenError(details={"slot_date": slot_date, "slot_time": slot_time})

    updated = {day: list(times) for day, times in (ledger or {}).items()}
    updated.setdefault(slot_date, []).append(slot_time)
    return updated


def remove_slot(ledger: Optional[SlotLedger], slot_date: str, slot_time: str) -> SlotLedger:
    """Return a copy of the ledger with the slot freed. Missing entries are ignored."""
    updated = {day: list(times) for day, times in (ledger or {}).items()}
    times = updated.get(slot_date)
    if times is None:
        return updated

    remaining = [t for t in times if t != slot_time]
    if remaining:
        updated[slot_date] = remaining
    else:
        del updated[slot_date]
    return updated
