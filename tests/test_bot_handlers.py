import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from telegram.ext import ConversationHandler

from special_days.bot_handlers import (
    PENDING_ADD_KEY,
    PENDING_EDIT_KEY,
    HandlerDependencies,
    SpecialDayListRow,
    _render_list_message,
    _render_next_message,
    add_confirm,
    delete_command,
    edit_category,
    edit_confirm,
    edit_date,
    edit_for_whom,
    edit_name,
    edit_start,
    is_authorized,
    parse_category_text,
    parse_special_day_text,
    reload_command,
)
from special_days.config_store import save_config_atomic
from special_days.date_logic import upcoming_events
from special_days.event_store import load_events, save_events_atomic
from special_days.models import AppConfig, ReminderConfiguration, SpecialDayCategory, SpecialDayEvent
from special_days.reminder_service import ReminderService, ReminderStatus
from special_days.settings import Settings
from test_reminder_service import FakeSink


def test_parse_special_day_text_full_date() -> None:
    assert parse_special_day_text("1990-03-14") == (3, 14, 1990)


def test_parse_special_day_text_short_date() -> None:
    assert parse_special_day_text("02-29") == (2, 29, None)


def test_parse_special_day_text_invalid_real_date() -> None:
    with pytest.raises(ValueError):
        parse_special_day_text("2025-02-29")


def test_parse_special_day_text_wrong_format() -> None:
    with pytest.raises(ValueError):
        parse_special_day_text("14/03/1990")


def test_parse_category_text_accepts_names_and_numbers() -> None:
    assert parse_category_text("loved ones") is SpecialDayCategory.LOVED_ONES
    assert parse_category_text("LOVED_ONES") is SpecialDayCategory.LOVED_ONES
    assert parse_category_text("4") is SpecialDayCategory.WORK
    assert parse_category_text(" Family ") is SpecialDayCategory.FAMILY


def test_parse_category_text_rejects_unknown() -> None:
    with pytest.raises(ValueError):
        parse_category_text("colleagues")
    with pytest.raises(ValueError):
        parse_category_text("9")


def test_render_list_message_structured_output() -> None:
    message = _render_list_message(
        [
            SpecialDayListRow(
                name="Birthday",
                for_whom="Mom",
                category=SpecialDayCategory.LOVED_ONES,
                days_until=1,
                next_date=date(2026, 5, 14),
            ),
            SpecialDayListRow(
                name="Project Deadline",
                for_whom="",
                category=SpecialDayCategory.WORK,
                days_until=12,
                next_date=date(2026, 5, 25),
            ),
        ]
    )

    assert message == (
        "Special days (2)\n"
        "Sorted by soonest:\n"
        "1. Mom's Birthday\n"
        "   Tomorrow! | Next 2026-05-14 | Loved Ones\n"
        "\n"
        "2. Project Deadline\n"
        "   12 days | Next 2026-05-25 | Work"
    )


def test_render_next_message() -> None:
    row = SpecialDayListRow(
        name="Graduation",
        for_whom="Brother",
        category=SpecialDayCategory.FAMILY,
        days_until=0,
        next_date=date(2026, 6, 1),
    )

    assert _render_next_message(row) == "Next up: Brother's Graduation\nToday! (2026-06-01)"
    assert _render_next_message(None) == "No upcoming special days."


@dataclass
class FakeUser:
    id: int


@dataclass
class FakeChat:
    id: int


@dataclass
class FakeMessage:
    text: str = ""
    replies: list[str] = field(default_factory=list)

    async def reply_text(self, text: str, **kwargs) -> None:
        self.replies.append(text)


@dataclass
class FakeUpdate:
    effective_user: FakeUser
    effective_chat: FakeChat
    effective_message: FakeMessage | None = None


def _settings() -> Settings:
    return Settings(
        telegram_bot_token="token",
        telegram_allowed_user_id=111,
        telegram_allowed_chat_id=222,
        config_path=Path("config/special_days.toml"),
        events_path=Path("data/special_days.json"),
    )


def test_is_authorized_true() -> None:
    update = FakeUpdate(effective_user=FakeUser(id=111), effective_chat=FakeChat(id=222))
    assert is_authorized(update, _settings()) is True


def test_is_authorized_false() -> None:
    update = FakeUpdate(effective_user=FakeUser(id=111), effective_chat=FakeChat(id=999))
    assert is_authorized(update, _settings()) is False


@dataclass
class RecordingService:
    data_changed_calls: list[list[SpecialDayEvent]] = field(default_factory=list)
    canceled_event_ids: list[str] = field(default_factory=list)

    async def data_changed(self, events: list[SpecialDayEvent], now: datetime) -> None:
        self.data_changed_calls.append(list(events))

    async def cancel_reminders_for_event(self, event_id: str) -> int:
        self.canceled_event_ids.append(event_id)
        return 2


@dataclass
class FakeApplication:
    bot_data: dict = field(default_factory=dict)


@dataclass
class FakeContext:
    application: FakeApplication
    args: list[str] | None = None
    user_data: dict = field(default_factory=dict)


def _handler_context(
    tmp_path: Path,
    events: list[SpecialDayEvent],
    service,
    *,
    enabled: bool = True,
) -> FakeContext:
    settings = Settings(
        telegram_bot_token="token",
        telegram_allowed_user_id=111,
        telegram_allowed_chat_id=222,
        config_path=tmp_path / "special_days.toml",
        events_path=tmp_path / "special_days.json",
    )
    save_config_atomic(
        settings.config_path,
        AppConfig(
            timezone="UTC",
            reminders=ReminderConfiguration(enabled=enabled, frequency_per_day=1, times_of_day=(time(9, 0),)),
        ),
    )
    save_events_atomic(settings.events_path, events)
    application = FakeApplication(
        bot_data={
            "settings": settings,
            "handler_deps": HandlerDependencies(settings=settings),
            "reminder_service": service,
        }
    )
    return FakeContext(application=application)


def _owner_update(text: str = "") -> FakeUpdate:
    return FakeUpdate(effective_user=FakeUser(id=111), effective_chat=FakeChat(id=222), effective_message=FakeMessage(text))


def _stored_events() -> list[SpecialDayEvent]:
    return [
        SpecialDayEvent(id="mom", name="Birthday", month=3, day=14, for_whom="Mom", notes="Call early"),
        SpecialDayEvent(id="work", name="Deadline", month=9, day=1, for_whom="", category=SpecialDayCategory.WORK),
    ]


def test_delete_command_cancels_reminders_for_removed_event(tmp_path: Path) -> None:
    events = _stored_events()
    service = RecordingService()
    context = _handler_context(tmp_path, events, service)
    context.args = ["1"]
    expected = upcoming_events(events, datetime.now(ZoneInfo("UTC")))[0][0]
    update = _owner_update()

    asyncio.run(delete_command(update, context))

    settings = context.application.bot_data["handler_deps"].settings
    assert service.canceled_event_ids == [expected.id]
    assert [event.id for event in load_events(settings.events_path)] == [
        event.id for event in events if event.id != expected.id
    ]
    assert "2 pending reminders canceled" in update.effective_message.replies[-1]


def test_delete_command_out_of_range_leaves_reminders_alone(tmp_path: Path) -> None:
    service = RecordingService()
    context = _handler_context(tmp_path, _stored_events(), service)
    context.args = ["5"]
    update = _owner_update()

    asyncio.run(delete_command(update, context))

    assert service.canceled_event_ids == []
    assert update.effective_message.replies == ["Entry must be between 1 and 2."]


def test_delete_command_rejects_other_users(tmp_path: Path) -> None:
    service = RecordingService()
    context = _handler_context(tmp_path, _stored_events(), service)
    context.args = ["1"]
    update = FakeUpdate(effective_user=FakeUser(id=5), effective_chat=FakeChat(id=222), effective_message=FakeMessage())

    asyncio.run(delete_command(update, context))

    assert service.canceled_event_ids == []
    assert len(load_events(tmp_path / "special_days.json")) == 2


def test_add_confirm_saves_and_refreshes_reminders(tmp_path: Path) -> None:
    service = RecordingService()
    context = _handler_context(tmp_path, [], service)
    context.user_data[PENDING_ADD_KEY] = {
        "name": "Anniversary",
        "for_whom": "Us",
        "month": 12,
        "day": 24,
        "year": 2015,
        "category": SpecialDayCategory.LOVED_ONES.value,
    }
    update = _owner_update("yes")

    result = asyncio.run(add_confirm(update, context))

    saved = load_events(tmp_path / "special_days.json")
    assert result == ConversationHandler.END
    assert [(event.name, event.month, event.day, event.year) for event in saved] == [("Anniversary", 12, 24, 2015)]
    assert service.data_changed_calls == [saved]
    assert PENDING_ADD_KEY not in context.user_data
    assert update.effective_message.replies == ["Special day saved."]


def test_add_confirm_no_discards_pending(tmp_path: Path) -> None:
    service = RecordingService()
    context = _handler_context(tmp_path, [], service)
    context.user_data[PENDING_ADD_KEY] = {"name": "Party", "month": 1, "day": 1, "category": "other"}

    result = asyncio.run(add_confirm(_owner_update("no"), context))

    assert result == ConversationHandler.END
    assert load_events(tmp_path / "special_days.json") == []
    assert service.data_changed_calls == []


def test_edit_flow_updates_entry_in_place(tmp_path: Path) -> None:
    events = _stored_events()
    service = RecordingService()
    context = _handler_context(tmp_path, events, service)
    context.args = ["1"]
    target = upcoming_events(events, datetime.now(ZoneInfo("UTC")))[0][0]

    asyncio.run(edit_start(_owner_update(), context))
    assert context.user_data[PENDING_EDIT_KEY]["id"] == target.id

    asyncio.run(edit_name(_owner_update("Party"), context))
    asyncio.run(edit_for_whom(_owner_update("keep"), context))
    asyncio.run(edit_date(_owner_update("07-04"), context))
    asyncio.run(edit_category(_owner_update("2"), context))
    update = _owner_update("yes")
    result = asyncio.run(edit_confirm(update, context))

    saved = {event.id: event for event in load_events(tmp_path / "special_days.json")}
    edited = saved[target.id]
    assert result == ConversationHandler.END
    assert len(saved) == 2
    assert (edited.name, edited.for_whom, edited.month, edited.day) == ("Party", target.for_whom, 7, 4)
    assert edited.category is SpecialDayCategory.FRIENDS
    assert edited.notes == target.notes
    assert len(service.data_changed_calls) == 1
    assert PENDING_EDIT_KEY not in context.user_data
    assert update.effective_message.replies == ["Special day updated."]


def test_edit_confirm_reports_entry_deleted_meanwhile(tmp_path: Path) -> None:
    service = RecordingService()
    context = _handler_context(tmp_path, _stored_events(), service)
    context.user_data[PENDING_EDIT_KEY] = {
        "id": "gone",
        "name": "Party",
        "for_whom": "",
        "month": 1,
        "day": 1,
        "year": None,
        "category": "other",
    }
    update = _owner_update("yes")

    asyncio.run(edit_confirm(update, context))

    assert service.data_changed_calls == []
    assert "no longer exists" in update.effective_message.replies[-1]


def test_edit_start_without_number_asks_for_one(tmp_path: Path) -> None:
    context = _handler_context(tmp_path, _stored_events(), RecordingService())
    update = _owner_update()

    asyncio.run(edit_start(update, context))

    assert update.effective_message.replies == ["Which entry? Send its number from /list."]


def test_reload_command_applies_config_from_disk(tmp_path: Path) -> None:
    service = ReminderService(sink=FakeSink())
    context = _handler_context(tmp_path, _stored_events(), service, enabled=True)
    update = _owner_update()

    asyncio.run(reload_command(update, context))

    assert service.status is ReminderStatus.ENABLED
    assert update.effective_message.replies[-1].startswith("Config reloaded.")


def test_reload_command_reports_disabled_config(tmp_path: Path) -> None:
    service = ReminderService(sink=FakeSink())
    context = _handler_context(tmp_path, _stored_events(), service, enabled=False)
    update = _owner_update()

    asyncio.run(reload_command(update, context))

    assert service.status is ReminderStatus.DISABLED
    assert update.effective_message.replies == ["No reminders scheduled (disabled)."]


def test_reload_command_reports_unreachable_chat(tmp_path: Path) -> None:
    service = ReminderService(sink=FakeSink(authorized=False))
    context = _handler_context(tmp_path, _stored_events(), service, enabled=True)
    update = _owner_update()

    asyncio.run(reload_command(update, context))

    assert service.status is ReminderStatus.DISABLED
    assert update.effective_message.replies == ["Reminders stay off: the reminder chat is not reachable."]
