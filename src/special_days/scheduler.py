from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum

from special_days.date_logic import days_until_description, next_occurrence
from special_days.models import ReminderConfiguration, ScheduledNotification, SpecialDayEvent

LOGGER = logging.getLogger(__name__)

NOTIFICATION_BASE_IDENTIFIER = "specialdays.reminder."


class SkipReason(str, Enum):
    DISABLED = "disabled"
    INVALID_FREQUENCY = "invalid-frequency"
    TIMES_MISMATCH = "times-mismatch"


@dataclass(frozen=True)
class Scheduled:
    notifications: tuple[ScheduledNotification, ...]


@dataclass(frozen=True)
class Skipped:
    reason: SkipReason

    @property
    def notifications(self) -> tuple[ScheduledNotification, ...]:
        return ()


ScheduleOutcome = Scheduled | Skipped


def event_identifier_prefix(event_id: str) -> str:
    return f"{NOTIFICATION_BASE_IDENTIFIER}{event_id}."


def notification_identifier(event_id: str, fire_instant: datetime) -> str:
    return (
        f"{event_identifier_prefix(event_id)}"
        f"{fire_instant.date().isoformat()}.{fire_instant.hour:02d}-{fire_instant.minute:02d}"
    )


def render_title(event: SpecialDayEvent) -> str:
    return f"Special Day Reminder: {event.name}"


def render_body(event: SpecialDayEvent, days_until: int) -> str:
    subject = f"{event.for_whom}'s {event.name}" if event.for_whom.strip() else event.name
    body = f"{subject}: {days_until_description(days_until)}"
    if event.notes:
        body = f"{body}\n{event.notes}"
    return body


def _fire_instant(day: date, slot: time, zone: tzinfo | None) -> datetime:
    return datetime.combine(day, time(slot.hour, slot.minute), tzinfo=zone)


def compute_reminders(
    events: list[SpecialDayEvent],
    config: ReminderConfiguration,
    now: datetime,
) -> ScheduleOutcome:
    """Expand eligible events into concrete notifications.

    Every day from today through the occurrence day gets one notification per
    time-of-day slot. Slots that are not strictly after ``now`` are dropped.
    Identifiers only depend on the event id and the fire slot, so a second
    pass over the same inputs yields the same identifiers.
    """
    if not config.enabled:
        return Skipped(SkipReason.DISABLED)
    if config.frequency_per_day < 1:
        LOGGER.info("Skipping reminders: frequency_per_day=%s", config.frequency_per_day)
        return Skipped(SkipReason.INVALID_FREQUENCY)
    if len(config.times_of_day) != config.frequency_per_day:
        LOGGER.info(
            "Skipping reminders: %s times of day configured for frequency %s",
            len(config.times_of_day),
            config.frequency_per_day,
        )
        return Skipped(SkipReason.TIMES_MISMATCH)

    today = now.date()
    notifications: list[ScheduledNotification] = []
    for event in events:
        occurrence = next_occurrence(event, now, config.leap_day_rule)
        if occurrence.days_until < 0 or occurrence.days_until > config.lookahead_days:
            continue

        for offset in range(occurrence.days_until + 1):
            day = today + timedelta(days=offset)
            remaining = occurrence.days_until - offset
            for slot in config.times_of_day:
                fire_instant = _fire_instant(day, slot, now.tzinfo)
                if fire_instant <= now:
                    continue
                notifications.append(
                    ScheduledNotification(
                        identifier=notification_identifier(event.id, fire_instant),
                        event_id=event.id,
                        fire_instant=fire_instant,
                        title=render_title(event),
                        body=render_body(event, remaining),
                        days_until=remaining,
                    )
                )

    notifications.sort(key=lambda item: (item.fire_instant, item.identifier))
    return Scheduled(tuple(notifications))
