"""
ReminderScheduler — turns a settings snapshot into one-shot alarms.

Smart reminders are generated from wake-up to bed time at a fixed
interval. Every remaining slot for today is scheduled up front, and each
firing schedules the next slot again (same tag, so it is a no-op when the
alarm already exists). When today's slots are exhausted the chain rolls
to the first slot of the next enabled weekday, so the chain perpetuates
itself with no timer loop:

    Idle -> Scheduled(i) -> Fired(i) -> Scheduled(i+1) | Scheduled(0) on a later day | Idle

Custom reminders are scheduled individually at their own time on their
own weekdays and re-chained to their next enabled day after firing.

Full rescheduling is memoized on (settings hash, day of last schedule).
The memo only skips redundant passes: a settings change or a new day
always reschedules.

Failure policy: a denied exact alarm degrades to an inexact one; any
other alarm failure is logged and the remaining alarms are still
scheduled.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional

from hydromate.reminders.alarms import AlarmPermissionDenied, AlarmSink, AlarmTag
from hydromate.reminders.settings import CustomReminder, UserSettings, settings_hash
from hydromate.reminders.store import (
    KEY_LAST_SCHEDULE_TIMESTAMP,
    KEY_SCHEDULED_SETTINGS_HASH,
    KEY_SNOOZE_SCHEDULED_TIME,
    KeyValueStore,
    get_datetime,
    set_datetime,
)
from hydromate.reminders.times import (
    compute_daily_reminder_times,
    find_next_day,
    find_next_enabled_day,
)

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Schedules, re-chains and cancels reminder alarms."""

    def __init__(
        self,
        alarms: AlarmSink,
        store: KeyValueStore,
        clock: Optional[Callable[[], datetime]] = None,
        lookahead_days: int = 7,
        max_smart_reminders: int = 48,
        max_custom_reminders: int = 50,
    ):
        """
        Args:
            alarms: sink that owns the actual alarms.
            store: persistent key-value store for the memo and pending snooze.
            clock: returns the current naive local datetime. Defaults to datetime.now.
            lookahead_days: how far ahead to look for an enabled weekday.
            max_smart_reminders: number of smart alarm slots (indices 0..n-1).
            max_custom_reminders: number of custom alarm slots.
        """
        self.alarms = alarms
        self.store = store
        self._clock = clock or datetime.now
        self.lookahead_days = lookahead_days
        self.max_smart_reminders = max_smart_reminders
        self.max_custom_reminders = max_custom_reminders

    def now(self) -> datetime:
        return self._clock()

    # ─── Full scheduling pass ─────────────────────────────────────────────────

    def schedule_notifications(self, settings: UserSettings, force: bool = False) -> bool:
        """
        Schedule every smart and custom reminder for the settings.

        Args:
            settings: current settings snapshot.
            force: ignore the memo (used after a restart, when alarms are gone).

        Returns:
            True if a scheduling pass ran, False if it was skipped or
            notifications are disabled.
        """
        if not settings.notifications_enabled:
            logger.info("Notifications disabled, cancelling all reminders")
            self.cancel_all()
            self.clear_schedule_cache()
            self.clear_snooze()
            return False

        now = self.now()
        if not force and not self.should_reschedule(settings, now):
            logger.debug("Reminder schedule is up to date, skipping")
            return False

        logger.info("Scheduling reminders")
        # A pending snooze is independent of the settings and survives rescheduling
        self._cancel_chains()

        if settings.smart_reminders_enabled:
            self.schedule_smart_reminders(settings, now.date(), now.time())
        if settings.custom_reminders_enabled:
            self.schedule_custom_reminders(settings, now.date(), now.time())

        self._save_schedule_cache(settings, now)
        return True

    def should_reschedule(self, settings: UserSettings, now: datetime) -> bool:
        if self.store.get(KEY_SCHEDULED_SETTINGS_HASH) != settings_hash(settings):
            logger.debug("Settings changed, rescheduling needed")
            return True

        last = get_datetime(self.store, KEY_LAST_SCHEDULE_TIMESTAMP)
        if last is None or last.date() != now.date():
            logger.debug("Last schedule was on a different day, rescheduling needed")
            return True

        return False

    def clear_schedule_cache(self) -> None:
        self.store.delete(KEY_LAST_SCHEDULE_TIMESTAMP)
        self.store.delete(KEY_SCHEDULED_SETTINGS_HASH)

    def _save_schedule_cache(self, settings: UserSettings, now: datetime) -> None:
        set_datetime(self.store, KEY_LAST_SCHEDULE_TIMESTAMP, now)
        self.store.set(KEY_SCHEDULED_SETTINGS_HASH, settings_hash(settings))

    # ─── Smart reminders ──────────────────────────────────────────────────────

    def smart_reminder_times(self, settings: UserSettings) -> List[time]:
        """Today's slots, capped at the number of smart alarm slots."""
        times = compute_daily_reminder_times(
            settings.wake_up_time,
            settings.bed_time,
            settings.reminder_interval_minutes,
        )
        if len(times) > self.max_smart_reminders:
            logger.warning(
                "%d smart reminder slots exceed the limit of %d, dropping the rest",
                len(times), self.max_smart_reminders,
            )
            times = times[: self.max_smart_reminders]
        return times

    def schedule_smart_reminders(
        self,
        settings: UserSettings,
        today: date,
        now: time,
    ) -> List[datetime]:
        """
        Schedule every smart slot of today still ahead of now.

        If none remain (or today is not an enabled day), schedule only the
        first slot of the next enabled day.

        Returns:
            The datetimes that were scheduled.
        """
        times = self.smart_reminder_times(settings)
        if not times:
            logger.info(
                "No smart reminder slots (wake %s, bed %s, interval %d min)",
                settings.wake_up_time, settings.bed_time, settings.reminder_interval_minutes,
            )
            return []

        remaining = []
        if today.weekday() in settings.smart_reminder_days:
            remaining = [(i, t) for i, t in enumerate(times) if t > now]

        if not remaining:
            when = self._roll_to_next_day(settings, times, today)
            return [when] if when else []

        scheduled = []
        for index, reminder_time in remaining:
            when = datetime.combine(today, reminder_time)
            if self._schedule(when, AlarmTag.smart(index)):
                scheduled.append(when)
        logger.info("Scheduled %d smart reminders for %s", len(scheduled), today)
        return scheduled

    def on_reminder_fired(self, settings: UserSettings, index: int) -> Optional[datetime]:
        """
        Schedule the link after smart slot `index` in the chain.

        The next slot still ahead of now today is scheduled; when today is
        exhausted the first slot of the next enabled day is.

        Returns:
            The scheduled datetime, or None if the chain goes idle.
        """
        if not settings.notifications_enabled or not settings.smart_reminders_enabled:
            return None

        times = self.smart_reminder_times(settings)
        if not times:
            return None

        now = self.now()
        today = now.date()
        if today.weekday() in settings.smart_reminder_days:
            for next_index in range(max(index + 1, 0), len(times)):
                if times[next_index] > now.time():
                    when = datetime.combine(today, times[next_index])
                    if not self._schedule(when, AlarmTag.smart(next_index)):
                        return None
                    logger.debug("Chained smart reminder #%d for %s", next_index, when)
                    return when

        return self._roll_to_next_day(settings, times, today)

    def schedule_next_day_reminder(self, settings: UserSettings) -> Optional[datetime]:
        """After the daily goal is reached, move the chain to the next enabled day."""
        if not settings.notifications_enabled or not settings.smart_reminders_enabled:
            return None
        times = self.smart_reminder_times(settings)
        if not times:
            return None
        return self._roll_to_next_day(settings, times, self.now().date())

    def _roll_to_next_day(
        self,
        settings: UserSettings,
        times: List[time],
        today: date,
    ) -> Optional[datetime]:
        next_day = find_next_enabled_day(
            today + timedelta(days=1),
            settings.smart_reminder_days,
            self.lookahead_days,
        )
        if next_day is None:
            logger.info("No enabled smart reminder day in the next %d days", self.lookahead_days)
            return None

        when = datetime.combine(next_day, times[0])
        if not self._schedule(when, AlarmTag.smart(0)):
            return None
        logger.info("Scheduled first smart reminder of next active day: %s", when)
        return when

    # ─── Custom reminders ─────────────────────────────────────────────────────

    def schedule_custom_reminders(
        self,
        settings: UserSettings,
        today: date,
        now: time,
    ) -> List[datetime]:
        """
        Schedule each enabled custom reminder at its next occurrence.

        Today if it is active today and still ahead of now, otherwise its
        next enabled weekday. The alarm slot is the reminder's position.
        """
        scheduled = []
        for index, reminder in enumerate(settings.custom_reminders):
            if index >= self.max_custom_reminders:
                logger.warning(
                    "More than %d custom reminders, dropping the rest",
                    self.max_custom_reminders,
                )
                break
            if not reminder.is_enabled:
                continue

            when = self._next_custom_occurrence(reminder, today, now)
            if when is None:
                logger.info("Custom reminder %r has no enabled day", reminder.label)
                continue

            tag = AlarmTag.custom(index, reminder.reminder_id, reminder.label)
            if self._schedule(when, tag):
                logger.debug("Custom reminder %r scheduled for %s", reminder.label, when)
                scheduled.append(when)
        return scheduled

    def reschedule_custom_reminder(
        self,
        settings: UserSettings,
        reminder_id: str,
    ) -> Optional[datetime]:
        """Schedule a custom reminder that just fired at its next occurrence."""
        if not settings.notifications_enabled or not settings.custom_reminders_enabled:
            return None

        for index, reminder in enumerate(settings.custom_reminders[: self.max_custom_reminders]):
            if reminder.reminder_id != reminder_id:
                continue
            if not reminder.is_enabled:
                return None
            now = self.now()
            when = self._next_custom_occurrence(reminder, now.date(), now.time())
            if when is None:
                return None
            tag = AlarmTag.custom(index, reminder.reminder_id, reminder.label)
            return when if self._schedule(when, tag) else None

        logger.info("Custom reminder %s no longer exists, not rescheduling", reminder_id)
        return None

    def _next_custom_occurrence(
        self,
        reminder: CustomReminder,
        today: date,
        now: time,
    ) -> Optional[datetime]:
        if reminder.is_enabled_for_day(today.weekday()) and reminder.time > now:
            return datetime.combine(today, reminder.time)

        next_day = find_next_day(
            today + timedelta(days=1),
            reminder.is_enabled_for_day,
            self.lookahead_days,
        )
        if next_day is None:
            return None
        return datetime.combine(next_day, reminder.time)

    # ─── Snooze ───────────────────────────────────────────────────────────────

    def schedule_snooze(
        self,
        settings: UserSettings,
        delay_minutes: Optional[int] = None,
    ) -> Optional[datetime]:
        """
        Schedule a one-shot snooze alarm and persist its target time.

        Args:
            settings: current settings snapshot.
            delay_minutes: defaults to settings.snooze_delay_minutes.

        Returns:
            The snooze time, or None when snooze is disabled or the delay is 0.
        """
        delay = settings.snooze_delay_minutes if delay_minutes is None else delay_minutes
        if not settings.snooze_enabled or delay <= 0:
            return None

        when = self.now() + timedelta(minutes=delay)
        self._schedule(when, AlarmTag.snooze())
        # Persisted even if scheduling failed, so a restart gets another try
        set_datetime(self.store, KEY_SNOOZE_SCHEDULED_TIME, when)
        logger.info("Snooze reminder scheduled for %s", when)
        return when

    def clear_snooze(self) -> None:
        self.store.delete(KEY_SNOOZE_SCHEDULED_TIME)

    def restore_after_reboot(self, settings: UserSettings) -> Optional[datetime]:
        """
        Rebuild alarms after the host restarted and lost them.

        Returns:
            The restored snooze time, if a pending future snooze existed.
        """
        restored = None
        pending = get_datetime(self.store, KEY_SNOOZE_SCHEDULED_TIME)
        if pending is not None:
            if pending > self.now():
                self._schedule(pending, AlarmTag.snooze())
                restored = pending
                logger.info("Restored snooze reminder for %s", pending)
            else:
                self.clear_snooze()

        if settings.notifications_enabled:
            self.schedule_notifications(settings, force=True)
        return restored

    # ─── Cancellation ─────────────────────────────────────────────────────────

    def cancel_all(self) -> None:
        """Cancel every smart slot, every custom slot and the snooze slot."""
        self._cancel_chains()
        self._cancel(AlarmTag.snooze())
        logger.debug("All reminders cancelled")

    def _cancel_chains(self) -> None:
        for index in range(self.max_smart_reminders):
            self._cancel(AlarmTag.smart(index))
        for index in range(self.max_custom_reminders):
            self._cancel(AlarmTag.custom(index))

    def _cancel(self, tag: AlarmTag) -> None:
        try:
            self.alarms.cancel(tag)
        except Exception as exc:
            logger.error("Failed to cancel %s: %s", tag.identity, exc)

    def _schedule(self, when: datetime, tag: AlarmTag) -> bool:
        try:
            self.alarms.schedule_at(when, tag, exact=True)
        except AlarmPermissionDenied:
            logger.warning("Exact alarm permission missing, using inexact alarm for %s", tag.identity)
            try:
                self.alarms.schedule_at(when, tag, exact=False)
            except Exception as exc:
                logger.error("Failed to schedule %s at %s: %s", tag.identity, when, exc)
                return False
        except Exception as exc:
            logger.error("Failed to schedule %s at %s: %s", tag.identity, when, exc)
            return False
        return True
