from __future__ import annotations

import os
import tempfile
import tomllib
from datetime import time
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from special_days.date_logic import LEAP_DAY_SUBSTITUTES
from special_days.models import (
    DEFAULT_LEAP_DAY_RULE,
    DEFAULT_LOOKAHEAD_DAYS,
    AppConfig,
    ReminderConfiguration,
)

ALLOWED_LEAP_DAY_RULES = set(LEAP_DAY_SUBSTITUTES)


def _toml_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def parse_time_of_day(value: str) -> time:
    pieces = value.strip().split(":")
    if len(pieces) != 2:
        raise ValueError(f"time of day must be in HH:MM format: {value!r}")

    hour, minute = pieces
    if not hour.isdigit() or not minute.isdigit():
        raise ValueError(f"time of day must contain numeric hour/minute: {value!r}")

    hour_i = int(hour)
    minute_i = int(minute)
    if hour_i < 0 or hour_i > 23 or minute_i < 0 or minute_i > 59:
        raise ValueError(f"time of day must be a valid 24-hour time: {value!r}")

    return time(hour_i, minute_i)


def format_time_of_day(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def default_times_of_day(frequency_per_day: int) -> tuple[time, ...]:
    if frequency_per_day == 2:
        return (time(9, 0), time(15, 0))
    if frequency_per_day == 3:
        return (time(9, 0), time(13, 0), time(17, 0))
    return (time(9, 0),)


def validate_config(config: AppConfig) -> AppConfig:
    timezone = config.timezone.strip()
    if not timezone:
        raise ValueError("timezone must not be empty")
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {timezone}") from exc

    reminders = config.reminders
    leap_day_rule = reminders.leap_day_rule.strip().lower()
    if leap_day_rule not in ALLOWED_LEAP_DAY_RULES:
        raise ValueError(f"leap_day_rule must be one of {sorted(ALLOWED_LEAP_DAY_RULES)}")

    if reminders.lookahead_days < 0:
        raise ValueError("lookahead_days must be a non-negative integer")

    # A frequency/times mismatch is left for the scheduler to report as skipped.
    return AppConfig(
        timezone=timezone,
        reminders=ReminderConfiguration(
            enabled=bool(reminders.enabled),
            frequency_per_day=int(reminders.frequency_per_day),
            times_of_day=tuple(time(slot.hour, slot.minute) for slot in reminders.times_of_day),
            lookahead_days=int(reminders.lookahead_days),
            leap_day_rule=leap_day_rule,
        ),
    )


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("rb") as file_obj:
        data = tomllib.load(file_obj)

    section = data.get("reminders", {})
    frequency = int(section.get("frequency_per_day", 1))
    raw_times = section.get("times_of_day")
    if raw_times is None:
        times_of_day = default_times_of_day(frequency)
    else:
        times_of_day = tuple(parse_time_of_day(str(value)) for value in raw_times)

    config = AppConfig(
        timezone=str(data.get("timezone", "")),
        reminders=ReminderConfiguration(
            enabled=bool(section.get("enabled", False)),
            frequency_per_day=frequency,
            times_of_day=times_of_day,
            lookahead_days=int(section.get("lookahead_days", DEFAULT_LOOKAHEAD_DAYS)),
            leap_day_rule=str(data.get("leap_day_rule", DEFAULT_LEAP_DAY_RULE)),
        ),
    )
    return validate_config(config)


def render_config(config: AppConfig) -> str:
    validated = validate_config(config)
    reminders = validated.reminders
    times = ", ".join(f'"{format_time_of_day(slot)}"' for slot in reminders.times_of_day)

    lines: list[str] = [
        f'timezone = "{_toml_escape(validated.timezone)}"',
        f'leap_day_rule = "{reminders.leap_day_rule}"',
        "",
        "# times_of_day needs exactly frequency_per_day entries, otherwise no reminders are scheduled.",
        "[reminders]",
        f"enabled = {'true' if reminders.enabled else 'false'}",
        f"frequency_per_day = {reminders.frequency_per_day}",
        f"times_of_day = [{times}]",
        f"lookahead_days = {reminders.lookahead_days}",
    ]
    return "\n".join(lines) + "\n"


def save_config_atomic(path: Path, config: AppConfig) -> None:
    rendered = render_config(config)
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        delete=False,
    ) as temp_file:
        temp_file.write(rendered)
        temp_name = temp_file.name

    os.replace(temp_name, path)


def ensure_default_config(path: Path) -> None:
    if path.exists():
        return

    default_config = AppConfig(
        timezone="America/Los_Angeles",
        reminders=ReminderConfiguration(
            enabled=True,
            frequency_per_day=1,
            times_of_day=default_times_of_day(1),
        ),
    )
    save_config_atomic(path, default_config)
