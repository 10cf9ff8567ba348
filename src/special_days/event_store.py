from __future__ import annotations

import json
import os
import tempfile
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Any

from special_days.date_logic import validate_month_day
from special_days.models import SpecialDayCategory, SpecialDayEvent

STORE_VERSION = 1


def new_event_id() -> str:
    return str(uuid.uuid4())


def _event_from_record(record: dict[str, Any]) -> SpecialDayEvent:
    name = str(record.get("name", "")).strip()
    if not name:
        raise ValueError("event name must not be empty")

    month = int(record.get("month", 0))
    day = int(record.get("day", 0))
    validate_month_day(month, day, allow_feb_29=True)

    notes = record.get("notes")
    year = record.get("year")
    return SpecialDayEvent(
        id=str(record.get("id") or new_event_id()),
        name=name,
        month=month,
        day=day,
        for_whom=str(record.get("for_whom", "")),
        category=SpecialDayCategory(record.get("category", SpecialDayCategory.OTHER.value)),
        notes=str(notes) if notes else None,
        year=int(year) if year is not None else None,
    )


def _event_to_record(event: SpecialDayEvent) -> dict[str, Any]:
    return {
        "id": event.id,
        "name": event.name,
        "month": event.month,
        "day": event.day,
        "year": event.year,
        "for_whom": event.for_whom,
        "category": event.category.value,
        "notes": event.notes,
    }


def load_events(path: Path) -> list[SpecialDayEvent]:
    if not path.exists():
        return []

    with path.open("r", encoding="utf-8") as file_obj:
        data = json.load(file_obj)

    records = data.get("events", []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise ValueError(f"Event store {path} must hold a list of events")
    return [_event_from_record(record) for record in records]


def save_events_atomic(path: Path, events: list[SpecialDayEvent]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"version": STORE_VERSION, "events": [_event_to_record(event) for event in events]}

    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        delete=False,
    ) as temp_file:
        json.dump(payload, temp_file, indent=2, ensure_ascii=False)
        temp_file.write("\n")
        temp_name = temp_file.name

    os.replace(temp_name, path)


def add_event(path: Path, event: SpecialDayEvent) -> list[SpecialDayEvent]:
    events = load_events(path)
    if any(existing.id == event.id for existing in events):
        event = replace(event, id=new_event_id())
    updated = [*events, event]
    save_events_atomic(path, updated)
    return updated


def update_event(path: Path, event: SpecialDayEvent) -> list[SpecialDayEvent]:
    events = load_events(path)
    for index, existing in enumerate(events):
        if existing.id == event.id:
            events[index] = event
            save_events_atomic(path, events)
            return events
    raise KeyError(f"Unknown event id: {event.id}")


def delete_event(path: Path, event_id: str) -> SpecialDayEvent | None:
    events = load_events(path)
    remaining = [event for event in events if event.id != event_id]
    if len(remaining) == len(events):
        return None

    removed = next(event for event in events if event.id == event_id)
    save_events_atomic(path, remaining)
    return removed
