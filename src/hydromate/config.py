from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    telegram_bot_token: str = ""
    telegram_chat_id: Optional[int] = None
    database_url: str = "sqlite:///./hydromate.db"
    user_id: int = 1  # single-user; settings/entries rows are keyed by it

    # Alarm host: when False every exact alarm is denied and degrades to inexact
    exact_alarms_allowed: bool = True
    lookahead_days: int = 7
    max_smart_reminders: int = 48
    max_custom_reminders: int = 50
    daily_reschedule_hour: int = 0
    daily_reschedule_minute: int = 5
    settings_sync_minutes: int = 5

    # Dehydration penalty policy
    caffeine_penalty_fraction: float = 0.05
    alcohol_penalty_fraction: float = 0.15
    combined_penalty_policy: Literal["additive", "max"] = "additive"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
