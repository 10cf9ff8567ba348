from __future__ import annotations

import logging
from datetime import time
from pathlib import Path
from zoneinfo import ZoneInfo

from telegram.ext import Application, CallbackContext

from special_days.bot_handlers import HandlerDependencies, build_handlers, sync_reminders
from special_days.config_store import ensure_default_config, load_config
from special_days.reminder_service import ReminderService
from special_days.settings import load_settings
from special_days.sinks import TelegramNotificationSink

LOGGER = logging.getLogger(__name__)

DAILY_REFRESH_TIME = time(hour=0, minute=5)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


async def daily_refresh_callback(context: CallbackContext) -> None:
    await sync_reminders(context.application)


async def _post_init(application: Application) -> None:
    await sync_reminders(application)


def main() -> None:
    configure_logging()

    settings = load_settings()
    _ensure_parent(settings.config_path)
    _ensure_parent(settings.events_path)

    ensure_default_config(settings.config_path)
    config = load_config(settings.config_path)
    tz = ZoneInfo(config.timezone)

    application = Application.builder().token(settings.telegram_bot_token).build()
    application.bot_data["settings"] = settings
    application.bot_data["handler_deps"] = HandlerDependencies(settings=settings)

    sink = TelegramNotificationSink(
        job_queue=application.job_queue,
        bot=application.bot,
        chat_id=settings.telegram_allowed_chat_id,
    )
    application.bot_data["reminder_service"] = ReminderService(sink=sink)

    for handler in build_handlers(settings):
        application.add_handler(handler)

    # the lookahead window slides at midnight, so recompute once a day
    application.job_queue.run_daily(
        daily_refresh_callback,
        time=time(DAILY_REFRESH_TIME.hour, DAILY_REFRESH_TIME.minute, tzinfo=tz),
        name="daily-special-days-refresh",
    )

    application.post_init = _post_init
    LOGGER.info("Starting special days bot")
    application.run_polling()


if __name__ == "__main__":
    main()
