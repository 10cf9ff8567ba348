from __future__ import annotations

import calendar
from datetime import date, datetime

from special_days.models import (
    DEFAULT_LEAP_DAY_RULE,
    NextOccurrence,
    SpecialDayCategory,
    SpecialDayEvent,
)


class InvalidSpecialDayError(ValueError):
    pass


# (month, day) a Feb 29 event falls on in common years
LEAP_DAY_SUBSTITUTES = {
    "feb28": (2, 28),
    "mar1": (3, 1),
}


def days_in_month(month: int, *, allow_feb_29: bool = True) -> int:
    # 2000 is a leap year, 2001 is not
    return calendar.monthrange(2000 if allow_feb_29 else 2001, month)[1]


def validate_month_day(month: int, day: int, *, allow_feb_29: bool = True) -> None:
    if not 1 <= month <= 12:
        raise InvalidSpecialDayError(f"Invalid month: {month}")

    last_day = days_in_month(month, allow_feb_29=allow_feb_29)
    if not 1 <= day <= last_day:
        raise InvalidSpecialDayError(
            f"Invalid day {day} for {calendar.month_name[month]} (1-{last_day})"
        )


def occurrence_for_year(event: SpecialDayEvent, year: int, leap_day_rule: str) -> date:
    if (event.month, event.day) != (2, 29) or calendar.isleap(year):
        return date(year, event.month, event.day)

    try:
        month, day = LEAP_DAY_SUBSTITUTES[leap_day_rule]
    except KeyError:
        raise InvalidSpecialDayError(f"Unsupported leap day rule: {leap_day_rule}") from None
    return date(year, month, day)


def _as_date(now: date | datetime) -> date:
    # datetime is a subclass of date
    if isinstance(now, datetime):
        return now.date()
    return now


def next_occurrence(
    event: SpecialDayEvent,
    now: date | datetime,
    leap_day_rule: str = DEFAULT_LEAP_DAY_RULE,
) -> NextOccurrence:
    """Soonest occurrence of ``event`` on or after the calendar day of ``now``.

    Comparison happens at day granularity, so an event falling on today's
    month/day is due today (``days_until == 0``) whatever the wall-clock time.
    The day count is a difference of calendar dates, which keeps it exact
    across daylight-saving transitions.
    """
    today = _as_date(now)
    candidate = occurrence_for_year(event, today.year, leap_day_rule)
    if candidate < today:
        candidate = occurrence_for_year(event, today.year + 1, leap_day_rule)
    return NextOccurrence(occurrence_date=candidate, days_until=(candidate - today).days)


def days_until_description(days_until: int) -> str:
    if days_until == 0:
        return "Today!"
    if days_until == 1:
        return "Tomorrow!"
    return f"{days_until} days"


def upcoming_events(
    events: list[SpecialDayEvent],
    today: date | datetime,
    leap_day_rule: str = DEFAULT_LEAP_DAY_RULE,
) -> list[tuple[SpecialDayEvent, NextOccurrence]]:
    rows = [(event, next_occurrence(event, today, leap_day_rule)) for event in events]
    rows.sort(key=lambda row: (row[1].days_until, row[0].name.lower(), row[0].for_whom.lower()))
    return rows


def events_for_category(
    events: list[SpecialDayEvent],
    category: SpecialDayCategory,
    today: date | datetime,
    leap_day_rule: str = DEFAULT_LEAP_DAY_RULE,
) -> list[tuple[SpecialDayEvent, NextOccurrence]]:
    matching = [event for event in events if event.category == category]
    return upcoming_events(matching, today, leap_day_rule)


def next_upcoming_event(
    events: list[SpecialDayEvent],
    today: date | datetime,
    leap_day_rule: str = DEFAULT_LEAP_DAY_RULE,
) -> tuple[SpecialDayEvent, NextOccurrence] | None:
    rows = upcoming_events(events, today, leap_day_rule)
    if not rows:
        return None
    return rows[0]
