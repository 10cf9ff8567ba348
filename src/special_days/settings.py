from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CONFIG_PATH = Path("config") / "special_days.toml"
DEFAULT_EVENTS_PATH = Path("data") / "special_days.json"


@dataclass(frozen=True)
class Settings:
    telegram_bot_token: str
    telegram_allowed_user_id: int
    telegram_allowed_chat_id: int
    config_path: Path
    events_path: Path


def _env_text(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "").strip()
    if not value:
        raise ValueError(f"Missing required environment variable: {name}")
    return value


def _env_int(environ: Mapping[str, str], name: str) -> int:
    value = _env_text(environ, name)
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer Telegram id, got {value!r}") from exc


def _env_path(environ: Mapping[str, str], name: str, default: Path, root: Path) -> Path:
    value = environ.get(name, "").strip()
    return Path(value) if value else root / default


def load_settings(environ: Mapping[str, str] | None = None, *, root: Path | None = None) -> Settings:
    """Read process settings; relative default paths resolve against ``root`` (cwd)."""
    environ = os.environ if environ is None else environ
    root = Path.cwd() if root is None else root

    return Settings(
        telegram_bot_token=_env_text(environ, "TELEGRAM_BOT_TOKEN"),
        telegram_allowed_user_id=_env_int(environ, "TELEGRAM_ALLOWED_USER_ID"),
        telegram_allowed_chat_id=_env_int(environ, "TELEGRAM_ALLOWED_CHAT_ID"),
        config_path=_env_path(environ, "SPECIAL_DAYS_CONFIG_PATH", DEFAULT_CONFIG_PATH, root),
        events_path=_env_path(environ, "SPECIAL_DAYS_EVENTS_PATH", DEFAULT_EVENTS_PATH, root),
    )
