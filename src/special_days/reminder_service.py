from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, time
from enum import Enum

from special_days.models import ReminderConfiguration, SpecialDayEvent
from special_days.scheduler import (
    ScheduleOutcome,
    Skipped,
    SkipReason,
    compute_reminders,
    event_identifier_prefix,
)
from special_days.sinks import NotificationSink, NotificationSinkError

LOGGER = logging.getLogger(__name__)


class ReminderStatus(str, Enum):
    DISABLED = "disabled"
    ENABLED = "enabled"


@dataclass
class DeliveryReport:
    outcome: ScheduleOutcome
    authorized: bool = True
    scheduled: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


class ReminderService:
    """Keeps the sink in line with the event list and reminder settings.

    Every reschedule clears all pending reminders first and then submits the
    freshly computed set. Submission is best-effort: a failed add is logged
    and reported, never retried.
    """

    def __init__(self, *, sink: NotificationSink, config: ReminderConfiguration | None = None) -> None:
        self._sink = sink
        initial = config or ReminderConfiguration(
            enabled=False,
            frequency_per_day=1,
            times_of_day=(time(9, 0),),
        )
        # always start disabled; enable() asks the sink for permission first
        self._config = replace(initial, enabled=False)

    @property
    def status(self) -> ReminderStatus:
        return ReminderStatus.ENABLED if self._config.enabled else ReminderStatus.DISABLED

    @property
    def config(self) -> ReminderConfiguration:
        return self._config

    async def enable(
        self,
        config: ReminderConfiguration,
        events: list[SpecialDayEvent],
        now: datetime,
    ) -> DeliveryReport:
        authorized = await self._sink.request_authorization()
        if not authorized:
            LOGGER.warning("Notification permission denied; reminders stay disabled")
            self._config = replace(config, enabled=False)
            await self.cancel_all_reminders()
            return DeliveryReport(outcome=Skipped(SkipReason.DISABLED), authorized=False)

        self._config = replace(config, enabled=True)
        return await self.reschedule(events, now)

    async def disable(self) -> None:
        self._config = replace(self._config, enabled=False)
        await self.cancel_all_reminders()

    async def reconfigure(
        self,
        frequency_per_day: int,
        times_of_day: tuple[time, ...],
        events: list[SpecialDayEvent],
        now: datetime,
    ) -> DeliveryReport:
        self._config = replace(
            self._config,
            frequency_per_day=frequency_per_day,
            times_of_day=tuple(times_of_day),
        )
        return await self.data_changed(events, now)

    async def data_changed(self, events: list[SpecialDayEvent], now: datetime) -> DeliveryReport:
        if self.status is ReminderStatus.DISABLED:
            await self.cancel_all_reminders()
            return DeliveryReport(outcome=Skipped(SkipReason.DISABLED))
        return await self.reschedule(events, now)

    async def apply_config(
        self,
        config: ReminderConfiguration,
        events: list[SpecialDayEvent],
        now: datetime,
    ) -> DeliveryReport:
        """Route a freshly loaded configuration to the matching transition."""
        if not config.enabled:
            if self.status is ReminderStatus.ENABLED:
                await self.disable()
            else:
                await self.cancel_all_reminders()
            self._config = replace(config, enabled=False)
            return DeliveryReport(outcome=Skipped(SkipReason.DISABLED))

        if self.status is ReminderStatus.DISABLED:
            return await self.enable(config, events, now)

        if (config.lookahead_days, config.leap_day_rule) != (
            self._config.lookahead_days,
            self._config.leap_day_rule,
        ):
            self._config = replace(config, enabled=True)
            return await self.reschedule(events, now)

        return await self.reconfigure(config.frequency_per_day, config.times_of_day, events, now)

    async def reschedule(self, events: list[SpecialDayEvent], now: datetime) -> DeliveryReport:
        await self.cancel_all_reminders()

        outcome = compute_reminders(events, self._config, now)
        report = DeliveryReport(outcome=outcome)
        if isinstance(outcome, Skipped):
            LOGGER.info("No reminders scheduled (%s)", outcome.reason.value)
            return report

        for notification in outcome.notifications:
            try:
                await self._sink.add(notification)
            except NotificationSinkError as exc:
                LOGGER.warning("Failed to schedule reminder %s: %s", notification.identifier, exc)
                report.failed.append((notification.identifier, str(exc)))
                continue
            report.scheduled.append(notification.identifier)

        LOGGER.info(
            "Scheduled %s reminders (%s failed) for %s events",
            len(report.scheduled),
            len(report.failed),
            len(events),
        )
        return report

    async def cancel_reminders_for_event(self, event_id: str) -> int:
        prefix = event_identifier_prefix(event_id)
        pending = await self._sink.pending_identifiers()
        to_cancel = [identifier for identifier in pending if identifier.startswith(prefix)]
        if to_cancel:
            await self._sink.remove_pending(to_cancel)
            LOGGER.info("Canceled %s pending reminders for event %s", len(to_cancel), event_id)
        return len(to_cancel)

    async def cancel_all_reminders(self) -> None:
        await self._sink.remove_all_pending()
