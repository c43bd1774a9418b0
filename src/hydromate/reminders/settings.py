"""Immutable settings snapshot consumed by the reminder scheduler."""
import hashlib
import json
from dataclasses import dataclass, field
from datetime import time
from typing import FrozenSet, Iterable, Optional, Tuple

ALL_DAYS: FrozenSet[int] = frozenset(range(7))  # Monday=0 .. Sunday=6

SNOOZE_DELAYS = (0, 5, 10, 15, 30)


def parse_days(csv: str) -> FrozenSet[int]:
    """'0,2,4' -> frozenset({0, 2, 4}). Blank or junk parts are ignored."""
    days = set()
    for part in csv.split(","):
        part = part.strip()
        if part.isdigit() and int(part) < 7:
            days.add(int(part))
    return frozenset(days)


def format_days(days: Iterable[int]) -> str:
    return ",".join(str(d) for d in sorted(set(days)))


@dataclass(frozen=True)
class CustomReminder:
    reminder_id: str
    time: time
    label: str = ""
    enabled_days: FrozenSet[int] = ALL_DAYS
    is_enabled: bool = True

    def is_enabled_for_day(self, weekday: int) -> bool:
        return self.is_enabled and weekday in self.enabled_days


@dataclass(frozen=True)
class UserSettings:
    daily_goal_ml: int = 2000
    goal_threshold: float = 1.0

    notifications_enabled: bool = True
    wake_up_time: time = time(8, 0)
    bed_time: time = time(22, 0)

    smart_reminders_enabled: bool = True
    reminder_interval_minutes: int = 60
    smart_reminder_days: FrozenSet[int] = ALL_DAYS

    custom_reminders_enabled: bool = False
    custom_reminders: Tuple[CustomReminder, ...] = field(default_factory=tuple)

    snooze_enabled: bool = True
    snooze_delay_minutes: int = 10

    show_progress: bool = True

    def is_smart_reminder_enabled_for_day(self, weekday: int) -> bool:
        return (
            self.notifications_enabled
            and self.smart_reminders_enabled
            and weekday in self.smart_reminder_days
        )

    def active_custom_reminders_for_day(self, weekday: int) -> Tuple[CustomReminder, ...]:
        if not self.notifications_enabled or not self.custom_reminders_enabled:
            return ()
        return tuple(r for r in self.custom_reminders if r.is_enabled_for_day(weekday))

    def has_active_reminders_for_day(self, weekday: int) -> bool:
        return (
            self.is_smart_reminder_enabled_for_day(weekday)
            or bool(self.active_custom_reminders_for_day(weekday))
        )

    def find_custom_reminder(self, reminder_id: str) -> Optional[CustomReminder]:
        return next((r for r in self.custom_reminders if r.reminder_id == reminder_id), None)


def settings_hash(settings: UserSettings) -> str:
    """
    Digest of every field that affects what gets scheduled.

    SHA-256 over a canonical JSON dump, so the value is stable across
    processes (unlike hash()). Goal and display fields are left out.
    """
    payload = {
        "notifications_enabled": settings.notifications_enabled,
        "wake_up_time": settings.wake_up_time.isoformat(),
        "bed_time": settings.bed_time.isoformat(),
        "smart_reminders_enabled": settings.smart_reminders_enabled,
        "reminder_interval_minutes": settings.reminder_interval_minutes,
        "smart_reminder_days": sorted(settings.smart_reminder_days),
        "custom_reminders_enabled": settings.custom_reminders_enabled,
        "custom_reminders": [
            {
                "id": r.reminder_id,
                "time": r.time.isoformat(),
                "label": r.label,
                "days": sorted(r.enabled_days),
                "enabled": r.is_enabled,
            }
            for r in settings.custom_reminders
        ],
        "snooze_enabled": settings.snooze_enabled,
        "snooze_delay_minutes": settings.snooze_delay_minutes,
    }
    raw = json.dumps(payload, sort_keys=True).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()
