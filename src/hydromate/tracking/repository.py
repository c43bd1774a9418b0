"""
SQLModel-backed repositories for settings, drinks and drink entries.

Each method opens its own short session on the engine, so callers only
ever hold plain values.
"""
import uuid
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from hydromate.hydration.calculator import DrinkMetadata
from hydromate.models.drink import Drink, DrinkEntry
from hydromate.models.settings import CustomReminderRecord, SettingsRecord
from hydromate.reminders.settings import CustomReminder, UserSettings, format_days, parse_days

# (name, hydration multiplier, caffeine mg / 250 ml, alcohol %)
DEFAULT_DRINKS = [
    ("Water", 1.0, 0, 0.0),
    ("Mineral Water", 1.0, 0, 0.0),
    ("Herbal Tea", 0.9, 0, 0.0),
    ("Green Tea", 0.9, 30, 0.0),
    ("Black Tea", 0.9, 47, 0.0),
    ("Coffee", 0.6, 95, 0.0),
    ("Espresso", 0.4, 500, 0.0),
    ("Decaf Coffee", 0.9, 5, 0.0),
    ("Milk", 1.2, 0, 0.0),
    ("Juice", 0.95, 0, 0.0),
    ("Coconut Water", 0.9, 0, 0.0),
    ("Sports Drink", 0.96, 0, 0.0),
    ("Energy Drink", 0.55, 80, 0.0),
    ("Soda", 0.83, 0, 0.0),
    ("Light Beer", 0.6, 0, 3.5),
    ("Beer", 0.4, 0, 6.0),
    ("Wine", 0.2, 0, 12.0),
    ("Irish Coffee", 0.3, 80, 15.0),
]


class DuplicateReminderError(ValueError):
    """A custom reminder with this id already exists."""


class SettingsRepository:
    """Reads and writes the single user's settings and custom reminders."""

    def __init__(self, engine, user_id: int = 1):
        self.engine = engine
        self.user_id = user_id

    def get(self) -> UserSettings:
        """Current settings snapshot; defaults if nothing was saved yet."""
        with Session(self.engine) as s:
            record = self._get_record(s)
            reminders = s.exec(
                select(CustomReminderRecord)
                .where(CustomReminderRecord.user_id == self.user_id)
                .order_by(CustomReminderRecord.position)
            ).all()

        if record is None:
            return UserSettings(custom_reminders=tuple(_to_reminder(r) for r in reminders))

        return UserSettings(
            daily_goal_ml=record.daily_goal_ml,
            goal_threshold=record.goal_threshold,
            notifications_enabled=record.notifications_enabled,
            wake_up_time=record.wake_up_time,
            bed_time=record.bed_time,
            smart_reminders_enabled=record.smart_reminders_enabled,
            reminder_interval_minutes=record.reminder_interval_minutes,
            smart_reminder_days=parse_days(record.smart_reminder_days),
            custom_reminders_enabled=record.custom_reminders_enabled,
            custom_reminders=tuple(_to_reminder(r) for r in reminders),
            snooze_enabled=record.snooze_enabled,
            snooze_delay_minutes=record.snooze_delay_minutes,
            show_progress=record.show_progress,
        )

    def save(self, settings: UserSettings) -> UserSettings:
        """
        Persist a full snapshot, replacing the stored custom reminder list.

        Returns:
            The snapshot as read back from the database.
        """
        with Session(self.engine) as s:
            record = self._get_record(s) or SettingsRecord(user_id=self.user_id)
            record.daily_goal_ml = settings.daily_goal_ml
            record.goal_threshold = settings.goal_threshold
            record.notifications_enabled = settings.notifications_enabled
            record.wake_up_time = settings.wake_up_time
            record.bed_time = settings.bed_time
            record.smart_reminders_enabled = settings.smart_reminders_enabled
            record.reminder_interval_minutes = settings.reminder_interval_minutes
            record.smart_reminder_days = format_days(settings.smart_reminder_days)
            record.custom_reminders_enabled = settings.custom_reminders_enabled
            record.snooze_enabled = settings.snooze_enabled
            record.snooze_delay_minutes = settings.snooze_delay_minutes
            record.show_progress = settings.show_progress
            record.updated_at = datetime.utcnow()
            s.add(record)

            existing = s.exec(
                select(CustomReminderRecord).where(CustomReminderRecord.user_id == self.user_id)
            ).all()
            for row in existing:
                s.delete(row)
            s.flush()

            for position, reminder in enumerate(settings.custom_reminders):
                s.add(CustomReminderRecord(
                    user_id=self.user_id,
                    reminder_id=reminder.reminder_id or str(uuid.uuid4()),
                    position=position,
                    time_of_day=reminder.time,
                    label=reminder.label,
                    enabled_days=format_days(reminder.enabled_days),
                    is_enabled=reminder.is_enabled,
                ))
            s.commit()

        return self.get()

    def add_custom_reminder(
        self,
        reminder_time: time,
        label: str = "",
        enabled_days=None,
        reminder_id: Optional[str] = None,
    ) -> CustomReminder:
        """Append a custom reminder at the end of the list.

        Raises:
            DuplicateReminderError: a reminder with this id already exists.
        """
        with Session(self.engine) as s:
            positions = s.exec(
                select(CustomReminderRecord.position)
                .where(CustomReminderRecord.user_id == self.user_id)
            ).all()
            reminder_id = reminder_id or str(uuid.uuid4())
            row = CustomReminderRecord(
                user_id=self.user_id,
                reminder_id=reminder_id,
                position=max(positions) + 1 if positions else 0,
                time_of_day=reminder_time,
                label=label,
                enabled_days=format_days(enabled_days if enabled_days is not None else range(7)),
            )
            s.add(row)
            try:
                s.commit()
            except IntegrityError as exc:
                raise DuplicateReminderError(reminder_id) from exc
            s.refresh(row)
            return _to_reminder(row)

    def delete_custom_reminder(self, reminder_id: str) -> bool:
        """Remove a custom reminder and close the gap in positions."""
        with Session(self.engine) as s:
            rows = s.exec(
                select(CustomReminderRecord)
                .where(CustomReminderRecord.user_id == self.user_id)
                .order_by(CustomReminderRecord.position)
            ).all()
            target = next((r for r in rows if r.reminder_id == reminder_id), None)
            if target is None:
                return False
            s.delete(target)
            for position, row in enumerate(r for r in rows if r is not target):
                row.position = position
                s.add(row)
            s.commit()
            return True

    def _get_record(self, s: Session) -> Optional[SettingsRecord]:
        return s.exec(
            select(SettingsRecord).where(SettingsRecord.user_id == self.user_id)
        ).first()


class DrinkRepository:
    """Drink catalogue access."""

    def __init__(self, engine):
        self.engine = engine

    def seed_defaults(self) -> int:
        """
        Insert the default drinks that are not present yet.

        Returns:
            Number of drinks inserted.
        """
        inserted = 0
        with Session(self.engine) as s:
            existing = set(s.exec(select(Drink.name)).all())
            for name, multiplier, caffeine, alcohol in DEFAULT_DRINKS:
                if name in existing:
                    continue
                s.add(Drink(
                    name=name,
                    hydration_multiplier=multiplier,
                    caffeine_mg_per_250ml=caffeine,
                    alcohol_percentage=alcohol,
                ))
                inserted += 1
            s.commit()
        return inserted

    def all_drinks(self) -> List[Drink]:
        with Session(self.engine) as s:
            return list(s.exec(select(Drink).order_by(Drink.id)).all())

    def find_by_name(self, name: str) -> Optional[Drink]:
        """Case-insensitive exact name match."""
        wanted = name.strip().lower()
        return next((d for d in self.all_drinks() if d.name.lower() == wanted), None)

    def metadata_map(self) -> Dict[int, DrinkMetadata]:
        """Drink id -> calculator metadata."""
        return {
            d.id: DrinkMetadata(
                hydration_multiplier=d.hydration_multiplier,
                contains_caffeine=d.contains_caffeine,
                contains_alcohol=d.contains_alcohol,
            )
            for d in self.all_drinks()
        }


class EntryRepository:
    """Logged drink entries for one user."""

    def __init__(self, engine, user_id: int = 1):
        self.engine = engine
        self.user_id = user_id

    def add(self, amount_ml: int, drink_id: int = 1, timestamp: Optional[datetime] = None) -> DrinkEntry:
        if amount_ml <= 0:
            raise ValueError(f"amount_ml must be positive, got {amount_ml}")
        entry = DrinkEntry(
            user_id=self.user_id,
            drink_id=drink_id,
            amount_ml=amount_ml,
            timestamp=timestamp or datetime.now(),
        )
        with Session(self.engine) as s:
            s.add(entry)
            s.commit()
            s.refresh(entry)
        return entry

    def delete(self, entry_id: int) -> bool:
        with Session(self.engine) as s:
            entry = s.get(DrinkEntry, entry_id)
            if entry is None or entry.user_id != self.user_id:
                return False
            s.delete(entry)
            s.commit()
            return True

    def for_day(self, day: date) -> List[DrinkEntry]:
        """Entries with a timestamp on the given local day, oldest first."""
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        with Session(self.engine) as s:
            return list(s.exec(
                select(DrinkEntry)
                .where(DrinkEntry.user_id == self.user_id)
                .where(DrinkEntry.timestamp >= start)
                .where(DrinkEntry.timestamp < end)
                .order_by(DrinkEntry.timestamp)
            ).all())


def _to_reminder(row: CustomReminderRecord) -> CustomReminder:
    return CustomReminder(
        reminder_id=row.reminder_id,
        time=row.time_of_day,
        label=row.label,
        enabled_days=parse_days(row.enabled_days),
        is_enabled=row.is_enabled,
    )
