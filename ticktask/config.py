from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _resolve_project_root() -> Path:
    home = os.getenv("TICKTASK_HOME", "").strip()
    if home:
        return Path(home).expanduser().resolve()
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()
USER_CONFIG_DIR = Path.home() / ".config" / "ticktask"


def _first_existing(name: str) -> Path | None:
    for base in (Path.cwd(), PROJECT_ROOT, USER_CONFIG_DIR):
        if (base / name).is_file():
            return base / name
    return None


def load_env() -> None:
    """Load `.env`, then `.env.<TICKTASK_ENV>` over it.

    Each file is looked up in the working directory, the project root and
    `~/.config/ticktask`, first match wins.
    """
    env_name = os.getenv("TICKTASK_ENV") or os.getenv("APP_ENV", "development")
    base_env = _first_existing(".env")
    if base_env is not None:
        load_dotenv(base_env)
    specific_env = _first_existing(f".env.{env_name}")
    if specific_env is not None:
        load_dotenv(specific_env, override=True)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    log_dir: str = "logs"
    week_starts_on: int = 1
    reminder_window_min: int = 5
    auto_create_schema: bool = True


load_env()

DATABASE_URL = os.getenv("DATABASE_URL", "").strip() or f"sqlite:///{PROJECT_ROOT / 'ticktask.db'}"

WEEK_STARTS_ON = int(os.getenv("WEEK_STARTS_ON", "1"))
if not 0 <= WEEK_STARTS_ON <= 6:
    raise RuntimeError("WEEK_STARTS_ON must be a weekday number between 0 (Sunday) and 6 (Saturday).")

SETTINGS = Settings(
    database_url=DATABASE_URL,
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    log_dir=os.getenv("LOG_DIR", "logs"),
    week_starts_on=WEEK_STARTS_ON,
    reminder_window_min=int(os.getenv("REMINDER_WINDOW_MIN", "5")),
    auto_create_schema=_env_flag("AUTO_CREATE_SCHEMA", True),
)
