from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum


DEFAULT_LOOKAHEAD_DAYS = 3
DEFAULT_LEAP_DAY_RULE = "feb28"


class SpecialDayCategory(str, Enum):
    LOVED_ONES = "Loved Ones"
    FRIENDS = "Friends"
    FAMILY = "Family"
    WORK = "Work"
    OTHER = "Other"

    @property
    def display_name(self) -> str:
        return self.value


@dataclass(frozen=True)
class SpecialDayEvent:
    id: str
    name: str
    month: int
    day: int
    for_whom: str
    category: SpecialDayCategory = SpecialDayCategory.OTHER
    notes: str | None = None
    year: int | None = None


@dataclass(frozen=True)
class NextOccurrence:
    occurrence_date: date
    days_until: int


@dataclass(frozen=True)
class ReminderConfiguration:
    enabled: bool
    frequency_per_day: int
    times_of_day: tuple[time, ...]
    lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS
    leap_day_rule: str = DEFAULT_LEAP_DAY_RULE


@dataclass(frozen=True)
class AppConfig:
    timezone: str
    reminders: ReminderConfiguration


@dataclass(frozen=True)
class ScheduledNotification:
    identifier: str
    event_id: str
    fire_instant: datetime
    title: str
    body: str
    days_until: int
