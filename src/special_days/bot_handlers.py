from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from telegram import Update
from telegram.ext import (
    Application,
    CallbackContext,
    CommandHandler,
    ConversationHandler,
    MessageHandler,
    filters,
)

from special_days.config_store import load_config
from special_days.date_logic import (
    days_until_description,
    events_for_category,
    next_upcoming_event,
    upcoming_events,
    validate_month_day,
)
from special_days.event_store import add_event, delete_event, load_events, new_event_id, update_event
from special_days.models import AppConfig, NextOccurrence, SpecialDayCategory, SpecialDayEvent
from special_days.reminder_service import DeliveryReport, ReminderService
from special_days.scheduler import Skipped
from special_days.settings import Settings

LOGGER = logging.getLogger(__name__)

(
    STATE_ADD_NAME,
    STATE_ADD_FOR_WHOM,
    STATE_ADD_DATE,
    STATE_ADD_CATEGORY,
    STATE_ADD_CONFIRM,
    STATE_EDIT_SELECT,
    STATE_EDIT_NAME,
    STATE_EDIT_FOR_WHOM,
    STATE_EDIT_DATE,
    STATE_EDIT_CATEGORY,
    STATE_EDIT_CONFIRM,
) = range(11)

PENDING_ADD_KEY = "pending_add_special_day"
PENDING_EDIT_KEY = "pending_edit_special_day"
KEEP_WORDS = {"keep", "same"}


@dataclass(frozen=True)
class HandlerDependencies:
    settings: Settings


@dataclass(frozen=True)
class SpecialDayListRow:
    name: str
    for_whom: str
    category: SpecialDayCategory
    days_until: int
    next_date: date


def is_authorized(update: Update, settings: Settings) -> bool:
    effective_user = update.effective_user
    effective_chat = update.effective_chat
    if effective_user is None or effective_chat is None:
        return False
    return (
        effective_user.id == settings.telegram_allowed_user_id
        and effective_chat.id == settings.telegram_allowed_chat_id
    )


async def _deny_unauthorized(update: Update) -> None:
    if update.effective_message:
        await update.effective_message.reply_text("This bot is restricted to its configured owner.")


def parse_special_day_text(raw_text: str) -> tuple[int, int, int | None]:
    value = raw_text.strip()

    full_match = re.fullmatch(r"(\d{4})-(\d{2})-(\d{2})", value)
    if full_match:
        year = int(full_match.group(1))
        month = int(full_match.group(2))
        day = int(full_match.group(3))
        date(year, month, day)
        return month, day, year

    short_match = re.fullmatch(r"(\d{2})-(\d{2})", value)
    if short_match:
        month = int(short_match.group(1))
        day = int(short_match.group(2))
        validate_month_day(month, day, allow_feb_29=True)
        return month, day, None

    raise ValueError("Date must use YYYY-MM-DD or MM-DD")


def parse_category_text(raw_text: str) -> SpecialDayCategory:
    value = " ".join(raw_text.strip().lower().replace("_", " ").split())
    categories = list(SpecialDayCategory)

    if value.isdigit() and 1 <= int(value) <= len(categories):
        return categories[int(value) - 1]

    for category in categories:
        if value in {category.value.lower(), category.name.lower().replace("_", " ")}:
            return category

    choices = ", ".join(category.display_name for category in categories)
    raise ValueError(f"Unknown category. Choose one of: {choices}")


def _render_category_choices() -> str:
    return "\n".join(
        f"{index}. {category.display_name}"
        for index, category in enumerate(SpecialDayCategory, start=1)
    )


def _render_help() -> str:
    return (
        "Commands:\n"
        "/add - Start the interactive special day wizard\n"
        "/list [category] - Show special days, soonest first\n"
        "/next - Show the next upcoming special day\n"
        "/edit - Interactively edit an existing special day\n"
        "/delete <number> - Delete an entry by its /list number\n"
        "/reload - Re-read the reminder config file and reschedule now\n"
        "/help - Show this help message\n"
        "/cancel - Cancel the active wizard\n\n"
        "Date format examples:\n"
        "- 1990-03-14\n"
        "- 03-14\n\n"
        "Categories: " + ", ".join(category.display_name for category in SpecialDayCategory)
    )


def _subject(name: str, for_whom: str) -> str:
    if not for_whom.strip():
        return name
    return f"{for_whom}'s {name}"


def _render_list_message(rows: list[SpecialDayListRow], *, heading: str = "Special days") -> str:
    lines = [f"{heading} ({len(rows)})", "Sorted by soonest:"]

    for index, row in enumerate(rows, start=1):
        lines.append(f"{index}. {_subject(row.name, row.for_whom)}")
        details = [
            days_until_description(row.days_until),
            f"Next {row.next_date.isoformat()}",
            row.category.display_name,
        ]
        lines.append(f"   {' | '.join(details)}")
        lines.append("")

    return "\n".join(lines).rstrip()


def _render_next_message(row: SpecialDayListRow | None) -> str:
    if row is None:
        return "No upcoming special days."
    return (
        f"Next up: {_subject(row.name, row.for_whom)}\n"
        f"{days_until_description(row.days_until)} ({row.next_date.isoformat()})"
    )


def _to_row(event: SpecialDayEvent, occurrence: NextOccurrence) -> SpecialDayListRow:
    return SpecialDayListRow(
        name=event.name,
        for_whom=event.for_whom,
        category=event.category,
        days_until=occurrence.days_until,
        next_date=occurrence.occurrence_date,
    )


def _now(config: AppConfig) -> datetime:
    return datetime.now(ZoneInfo(config.timezone))


async def _refresh_reminders(context: CallbackContext, events: list[SpecialDayEvent], config: AppConfig) -> None:
    service: ReminderService = context.application.bot_data["reminder_service"]
    await service.data_changed(events, _now(config))


async def sync_reminders(application: Application) -> DeliveryReport:
    """Reload config and events from disk and hand them to the reminder service."""
    settings: Settings = application.bot_data["settings"]
    service: ReminderService = application.bot_data["reminder_service"]

    config = load_config(settings.config_path)
    events = load_events(settings.events_path)

    report = await service.apply_config(config.reminders, events, _now(config))
    if not report.authorized:
        LOGGER.warning("Reminders are disabled until chat %s is reachable", settings.telegram_allowed_chat_id)
    return report


def _render_sync_message(report: DeliveryReport) -> str:
    if not report.authorized:
        return "Reminders stay off: the reminder chat is not reachable."
    if isinstance(report.outcome, Skipped):
        return f"No reminders scheduled ({report.outcome.reason.value})."

    message = f"Config reloaded. {len(report.scheduled)} reminders scheduled."
    if report.failed:
        message += f" {len(report.failed)} could not be scheduled."
    return message


async def help_command(update: Update, context: CallbackContext) -> None:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return
    await update.effective_message.reply_text(_render_help())


async def list_command(update: Update, context: CallbackContext) -> None:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    settings = deps.settings
    if not is_authorized(update, settings):
        await _deny_unauthorized(update)
        return

    config = load_config(settings.config_path)
    events = load_events(settings.events_path)
    now = _now(config)
    rule = config.reminders.leap_day_rule

    heading = "Special days"
    if context.args:
        try:
            category = parse_category_text(" ".join(context.args))
        except ValueError as exc:
            await update.effective_message.reply_text(str(exc))
            return
        pairs = events_for_category(events, category, now, rule)
        heading = category.display_name
    else:
        pairs = upcoming_events(events, now, rule)

    if not pairs:
        await update.effective_message.reply_text("No special days are currently tracked.")
        return

    rows = [_to_row(event, occurrence) for event, occurrence in pairs]
    await update.effective_message.reply_text(_render_list_message(rows, heading=heading))


async def next_command(update: Update, context: CallbackContext) -> None:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    settings = deps.settings
    if not is_authorized(update, settings):
        await _deny_unauthorized(update)
        return

    config = load_config(settings.config_path)
    events = load_events(settings.events_path)
    found = next_upcoming_event(events, _now(config), config.reminders.leap_day_rule)
    row = _to_row(*found) if found is not None else None
    await update.effective_message.reply_text(_render_next_message(row))


async def reload_command(update: Update, context: CallbackContext) -> None:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return

    try:
        report = await sync_reminders(context.application)
    except (OSError, ValueError) as exc:
        LOGGER.warning("Reload failed: %s", exc)
        await update.effective_message.reply_text(f"Could not reload config: {exc}")
        return

    await update.effective_message.reply_text(_render_sync_message(report))


async def delete_command(update: Update, context: CallbackContext) -> None:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    settings = deps.settings
    if not is_authorized(update, settings):
        await _deny_unauthorized(update)
        return

    if not context.args or not context.args[0].isdigit():
        await update.effective_message.reply_text("Usage: /delete <number from /list>")
        return

    config = load_config(settings.config_path)
    events = load_events(settings.events_path)
    pairs = upcoming_events(events, _now(config), config.reminders.leap_day_rule)
    selected = int(context.args[0])
    if selected < 1 or selected > len(pairs):
        await update.effective_message.reply_text(f"Entry must be between 1 and {len(pairs)}.")
        return

    target = pairs[selected - 1][0]
    removed = delete_event(settings.events_path, target.id)
    if removed is None:
        await update.effective_message.reply_text("That entry no longer exists. Send /list and try again.")
        return

    service: ReminderService = context.application.bot_data["reminder_service"]
    canceled = await service.cancel_reminders_for_event(removed.id)
    await update.effective_message.reply_text(
        f"Deleted {_subject(removed.name, removed.for_whom)} ({canceled} pending reminders canceled)."
    )
    LOGGER.info("Deleted special day %s", removed.id)


async def add_start(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    context.user_data[PENDING_ADD_KEY] = {}
    await update.effective_message.reply_text(
        "Add special day wizard started.\nStep 1/5: Send the occasion (e.g., Birthday)."
    )
    return STATE_ADD_NAME


async def add_name(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    name = (update.effective_message.text or "").strip()
    if not name:
        await update.effective_message.reply_text("Occasion cannot be empty. Please send a name.")
        return STATE_ADD_NAME

    context.user_data[PENDING_ADD_KEY] = {"name": name}
    await update.effective_message.reply_text("Step 2/5: Who is it for? (send skip for nobody)")
    return STATE_ADD_FOR_WHOM


async def add_for_whom(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    raw_text = (update.effective_message.text or "").strip()
    pending = context.user_data.get(PENDING_ADD_KEY, {})
    pending["for_whom"] = "" if raw_text.lower() == "skip" else raw_text
    context.user_data[PENDING_ADD_KEY] = pending

    await update.effective_message.reply_text("Step 3/5: Send the date as YYYY-MM-DD or MM-DD.")
    return STATE_ADD_DATE


async def add_date(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    raw_text = update.effective_message.text or ""
    try:
        month, day, year = parse_special_day_text(raw_text)
    except ValueError as exc:
        await update.effective_message.reply_text(f"{exc}. Please send YYYY-MM-DD or MM-DD.")
        return STATE_ADD_DATE

    pending = context.user_data.get(PENDING_ADD_KEY, {})
    pending.update({"month": month, "day": day, "year": year})
    context.user_data[PENDING_ADD_KEY] = pending

    await update.effective_message.reply_text(
        "Step 4/5: Pick a category by number or name:\n" + _render_category_choices()
    )
    return STATE_ADD_CATEGORY


async def add_category(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    try:
        category = parse_category_text(update.effective_message.text or "")
    except ValueError as exc:
        await update.effective_message.reply_text(str(exc))
        return STATE_ADD_CATEGORY

    pending = context.user_data.get(PENDING_ADD_KEY, {})
    pending["category"] = category.value
    context.user_data[PENDING_ADD_KEY] = pending

    year = pending.get("year")
    year_text = str(year) if year is not None else "(not set)"
    summary = (
        "Step 5/5: Confirm this entry:\n"
        f"Occasion: {pending.get('name')}\n"
        f"For: {pending.get('for_whom') or '(nobody)'}\n"
        f"Date: {pending.get('month'):02d}-{pending.get('day'):02d}\n"
        f"Year: {year_text}\n"
        f"Category: {category.display_name}\n\n"
        "Reply with yes to save, or no to cancel."
    )
    await update.effective_message.reply_text(summary)
    return STATE_ADD_CONFIRM


async def add_confirm(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    settings = deps.settings
    if not is_authorized(update, settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    decision = (update.effective_message.text or "").strip().lower()
    if decision not in {"yes", "y", "no", "n"}:
        await update.effective_message.reply_text("Please reply with yes or no.")
        return STATE_ADD_CONFIRM

    if decision in {"no", "n"}:
        context.user_data.pop(PENDING_ADD_KEY, None)
        await update.effective_message.reply_text("Canceled. No changes were made.")
        return ConversationHandler.END

    pending = context.user_data.get(PENDING_ADD_KEY, {})
    event = SpecialDayEvent(
        id=new_event_id(),
        name=str(pending["name"]),
        month=int(pending["month"]),
        day=int(pending["day"]),
        for_whom=str(pending.get("for_whom", "")),
        category=SpecialDayCategory(pending["category"]),
        year=int(pending["year"]) if pending.get("year") is not None else None,
    )
    events = add_event(settings.events_path, event)
    context.user_data.pop(PENDING_ADD_KEY, None)

    await _refresh_reminders(context, events, load_config(settings.config_path))
    await update.effective_message.reply_text("Special day saved.")
    LOGGER.info("Added special day %s for %s", event.name, event.for_whom or "-")
    return ConversationHandler.END


async def cancel_command(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    context.user_data.pop(PENDING_ADD_KEY, None)
    context.user_data.pop(PENDING_EDIT_KEY, None)
    await update.effective_message.reply_text("Wizard canceled.")
    return ConversationHandler.END


def _keeps_current(raw_text: str) -> bool:
    return raw_text.strip().lower() in KEEP_WORDS


def _find_event(events: list[SpecialDayEvent], event_id: str) -> SpecialDayEvent | None:
    for event in events:
        if event.id == event_id:
            return event
    return None


async def _select_for_edit(update: Update, context: CallbackContext, raw_choice: str) -> int:
    settings: Settings = context.application.bot_data["handler_deps"].settings
    config = load_config(settings.config_path)
    events = load_events(settings.events_path)
    pairs = upcoming_events(events, _now(config), config.reminders.leap_day_rule)
    if not pairs:
        await update.effective_message.reply_text("No special days are currently tracked.")
        return ConversationHandler.END

    choice = raw_choice.strip()
    if not choice.isdigit() or not 1 <= int(choice) <= len(pairs):
        await update.effective_message.reply_text(f"Send a number between 1 and {len(pairs)} from /list.")
        return STATE_EDIT_SELECT

    target = pairs[int(choice) - 1][0]
    context.user_data[PENDING_EDIT_KEY] = {
        "id": target.id,
        "name": target.name,
        "for_whom": target.for_whom,
        "month": target.month,
        "day": target.day,
        "year": target.year,
        "category": target.category.value,
    }
    await update.effective_message.reply_text(
        f"Editing {_subject(target.name, target.for_whom)}. Send keep at any step to leave a field as it is.\n"
        f"Step 1/5: Occasion (currently {target.name})."
    )
    return STATE_EDIT_NAME


async def edit_start(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    context.user_data.pop(PENDING_EDIT_KEY, None)
    if context.args:
        return await _select_for_edit(update, context, context.args[0])

    await update.effective_message.reply_text("Which entry? Send its number from /list.")
    return STATE_EDIT_SELECT


async def edit_select(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    return await _select_for_edit(update, context, update.effective_message.text or "")


async def edit_name(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    raw_text = (update.effective_message.text or "").strip()
    pending = context.user_data.get(PENDING_EDIT_KEY, {})
    if not raw_text:
        await update.effective_message.reply_text("Occasion cannot be empty. Send a name or keep.")
        return STATE_EDIT_NAME
    if not _keeps_current(raw_text):
        pending["name"] = raw_text

    await update.effective_message.reply_text(
        f"Step 2/5: Who is it for? (currently {pending.get('for_whom') or 'nobody'}; send none to clear)"
    )
    return STATE_EDIT_FOR_WHOM


async def edit_for_whom(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    raw_text = (update.effective_message.text or "").strip()
    pending = context.user_data.get(PENDING_EDIT_KEY, {})
    if raw_text.lower() == "none":
        pending["for_whom"] = ""
    elif not _keeps_current(raw_text):
        pending["for_whom"] = raw_text

    await update.effective_message.reply_text(
        f"Step 3/5: Date as YYYY-MM-DD or MM-DD (currently {pending['month']:02d}-{pending['day']:02d})."
    )
    return STATE_EDIT_DATE


async def edit_date(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    raw_text = update.effective_message.text or ""
    pending = context.user_data.get(PENDING_EDIT_KEY, {})
    if not _keeps_current(raw_text):
        try:
            month, day, year = parse_special_day_text(raw_text)
        except ValueError as exc:
            await update.effective_message.reply_text(f"{exc}. Please send YYYY-MM-DD, MM-DD or keep.")
            return STATE_EDIT_DATE
        pending.update({"month": month, "day": day, "year": year})

    current = SpecialDayCategory(pending["category"]).display_name
    await update.effective_message.reply_text(
        f"Step 4/5: Pick a category by number or name (currently {current}):\n" + _render_category_choices()
    )
    return STATE_EDIT_CATEGORY


async def edit_category(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    raw_text = update.effective_message.text or ""
    pending = context.user_data.get(PENDING_EDIT_KEY, {})
    if not _keeps_current(raw_text):
        try:
            category = parse_category_text(raw_text)
        except ValueError as exc:
            await update.effective_message.reply_text(str(exc))
            return STATE_EDIT_CATEGORY
        pending["category"] = category.value

    year = pending.get("year")
    summary = (
        "Step 5/5: Confirm the updated entry:\n"
        f"Occasion: {pending.get('name')}\n"
        f"For: {pending.get('for_whom') or '(nobody)'}\n"
        f"Date: {pending['month']:02d}-{pending['day']:02d}\n"
        f"Year: {year if year is not None else '(not set)'}\n"
        f"Category: {SpecialDayCategory(pending['category']).display_name}\n\n"
        "Reply with yes to save, or no to cancel."
    )
    await update.effective_message.reply_text(summary)
    return STATE_EDIT_CONFIRM


async def edit_confirm(update: Update, context: CallbackContext) -> int:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    settings = deps.settings
    if not is_authorized(update, settings):
        await _deny_unauthorized(update)
        return ConversationHandler.END

    decision = (update.effective_message.text or "").strip().lower()
    if decision not in {"yes", "y", "no", "n"}:
        await update.effective_message.reply_text("Please reply with yes or no.")
        return STATE_EDIT_CONFIRM

    pending = context.user_data.pop(PENDING_EDIT_KEY, {})
    if decision in {"no", "n"}:
        await update.effective_message.reply_text("Canceled. No changes were made.")
        return ConversationHandler.END

    # notes are not editable here, carry them over from the stored entry
    current = _find_event(load_events(settings.events_path), str(pending["id"]))
    if current is None:
        await update.effective_message.reply_text("That entry no longer exists. Send /list and try again.")
        return ConversationHandler.END

    event = SpecialDayEvent(
        id=current.id,
        name=str(pending["name"]),
        month=int(pending["month"]),
        day=int(pending["day"]),
        for_whom=str(pending.get("for_whom", "")),
        category=SpecialDayCategory(pending["category"]),
        notes=current.notes,
        year=int(pending["year"]) if pending.get("year") is not None else None,
    )
    try:
        events = update_event(settings.events_path, event)
    except KeyError:
        await update.effective_message.reply_text("That entry no longer exists. Send /list and try again.")
        return ConversationHandler.END

    await _refresh_reminders(context, events, load_config(settings.config_path))
    await update.effective_message.reply_text("Special day updated.")
    LOGGER.info("Updated special day %s", event.id)
    return ConversationHandler.END


def build_handlers(settings: Settings) -> list:
    add_conversation = ConversationHandler(
        entry_points=[CommandHandler("add", add_start)],
        states={
            STATE_ADD_NAME: [MessageHandler(filters.TEXT & ~filters.COMMAND, add_name)],
            STATE_ADD_FOR_WHOM: [MessageHandler(filters.TEXT & ~filters.COMMAND, add_for_whom)],
            STATE_ADD_DATE: [MessageHandler(filters.TEXT & ~filters.COMMAND, add_date)],
            STATE_ADD_CATEGORY: [MessageHandler(filters.TEXT & ~filters.COMMAND, add_category)],
            STATE_ADD_CONFIRM: [MessageHandler(filters.TEXT & ~filters.COMMAND, add_confirm)],
        },
        fallbacks=[CommandHandler("cancel", cancel_command)],
        name="add_special_day_conversation",
        persistent=False,
    )

    edit_conversation = ConversationHandler(
        entry_points=[CommandHandler("edit", edit_start)],
        states={
            STATE_EDIT_SELECT: [MessageHandler(filters.TEXT & ~filters.COMMAND, edit_select)],
            STATE_EDIT_NAME: [MessageHandler(filters.TEXT & ~filters.COMMAND, edit_name)],
            STATE_EDIT_FOR_WHOM: [MessageHandler(filters.TEXT & ~filters.COMMAND, edit_for_whom)],
            STATE_EDIT_DATE: [MessageHandler(filters.TEXT & ~filters.COMMAND, edit_date)],
            STATE_EDIT_CATEGORY: [MessageHandler(filters.TEXT & ~filters.COMMAND, edit_category)],
            STATE_EDIT_CONFIRM: [MessageHandler(filters.TEXT & ~filters.COMMAND, edit_confirm)],
        },
        fallbacks=[CommandHandler("cancel", cancel_command)],
        name="edit_special_day_conversation",
        persistent=False,
    )

    return [
        CommandHandler("help", help_command),
        CommandHandler("list", list_command),
        CommandHandler("next", next_command),
        CommandHandler("delete", delete_command),
        CommandHandler("reload", reload_command),
        CommandHandler("cancel", cancel_command),
        add_conversation,
        edit_conversation,
    ]
