from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Protocol

from telegram import Bot
from telegram.error import TelegramError
from telegram.ext import CallbackContext, JobQueue

from special_days.models import ScheduledNotification
from special_days.scheduler import NOTIFICATION_BASE_IDENTIFIER

LOGGER = logging.getLogger(__name__)


class NotificationSinkError(RuntimeError):
    pass


class NotificationSink(Protocol):
    async def request_authorization(self) -> bool: ...

    async def add(self, notification: ScheduledNotification) -> None: ...

    async def pending_identifiers(self) -> list[str]: ...

    async def remove_pending(self, identifiers: Iterable[str]) -> None: ...

    async def remove_all_pending(self) -> None: ...


def format_notification_text(notification: ScheduledNotification) -> str:
    return f"{notification.title}\n{notification.body}"


async def deliver_notification(context: CallbackContext) -> None:
    notification: ScheduledNotification = context.job.data
    await context.bot.send_message(chat_id=context.job.chat_id, text=format_notification_text(notification))
    LOGGER.info("Delivered reminder %s", notification.identifier)


class TelegramNotificationSink:
    """Notification sink backed by one-shot jobs on the bot's job queue.

    Each notification becomes a job named after its identifier. Only jobs
    whose name carries the reminder prefix belong to this sink.
    """

    def __init__(self, *, job_queue: JobQueue | None, bot: Bot, chat_id: int) -> None:
        if job_queue is None:
            raise RuntimeError("Job queue is unavailable; install python-telegram-bot[job-queue]")
        self._job_queue = job_queue
        self._bot = bot
        self._chat_id = chat_id

    async def request_authorization(self) -> bool:
        try:
            await self._bot.get_chat(chat_id=self._chat_id)
        except TelegramError as exc:
            LOGGER.warning("Reminder chat %s is not reachable: %s", self._chat_id, exc)
            return False
        return True

    async def add(self, notification: ScheduledNotification) -> None:
        if self._job_queue.get_jobs_by_name(notification.identifier):
            return

        now = datetime.now(notification.fire_instant.tzinfo)
        if notification.fire_instant <= now:
            raise NotificationSinkError(
                f"Fire instant {notification.fire_instant.isoformat()} is not in the future"
            )

        self._job_queue.run_once(
            deliver_notification,
            when=notification.fire_instant,
            data=notification,
            name=notification.identifier,
            chat_id=self._chat_id,
        )

    async def pending_identifiers(self) -> list[str]:
        return [
            job.name
            for job in self._job_queue.jobs()
            if job.name and job.name.startswith(NOTIFICATION_BASE_IDENTIFIER) and not job.removed
        ]

    async def remove_pending(self, identifiers: Iterable[str]) -> None:
        for identifier in identifiers:
            for job in self._job_queue.get_jobs_by_name(identifier):
                job.schedule_removal()

    async def remove_all_pending(self) -> None:
        await self.remove_pending(await self.pending_identifiers())
