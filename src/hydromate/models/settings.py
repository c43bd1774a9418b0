"""Persisted user settings and custom reminders."""
from datetime import datetime, time
from typing import Optional

from sqlmodel import Field, SQLModel

ALL_DAYS_CSV = "0,1,2,3,4,5,6"  # Monday=0 .. Sunday=6, as date.weekday()


class SettingsRecord(SQLModel, table=True):
    """One row per user. Read as an immutable UserSettings snapshot."""

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(default=1, unique=True, index=True)

    daily_goal_ml: int = 2000
    goal_threshold: float = 1.0  # fraction of the goal that counts as reached

    notifications_enabled: bool = True
    wake_up_time: time = time(8, 0)
    bed_time: time = time(22, 0)

    smart_reminders_enabled: bool = True
    reminder_interval_minutes: int = 60
    smart_reminder_days: str = ALL_DAYS_CSV  # comma-separated weekday ints

    custom_reminders_enabled: bool = False

    snooze_enabled: bool = True
    snooze_delay_minutes: int = 10

    show_progress: bool = True

    updated_at: datetime = Field(default_factory=datetime.utcnow)


class CustomReminderRecord(SQLModel, table=True):
    """A user-defined reminder at a fixed time of day."""

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(default=1, index=True)
    reminder_id: str = Field(unique=True, index=True)  # stable, caller-assigned
    position: int = 0  # order in the user's list; also the alarm slot
    time_of_day: time
    label: str = ""
    enabled_days: str = ALL_DAYS_CSV
    is_enabled: bool = True
