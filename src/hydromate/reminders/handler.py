"""
ReminderHandler — what happens when an alarm fires.

Invoked by the alarm host (APSchedulerAlarmSink.on_fire) with the fired
tag. It reads a fresh settings snapshot, checks today's progress with the
hydration calculator, sends the message and schedules the next link of
the chain. The next link is scheduled before the message is sent so a
delivery failure never breaks the chain.

Alarms the current settings no longer ask for (reminders switched off,
deleted or moved off today) are dropped; the settings sync job replaces
them shortly after the change.

Errors are logged and never propagate back into the scheduler loop.
"""
import logging
from typing import Callable, Protocol

from hydromate.hydration.calculator import HydrationProgress
from hydromate.notifications import messages
from hydromate.notifications.messages import ReminderMessage
from hydromate.reminders.alarms import AlarmKind, AlarmTag
from hydromate.reminders.scheduler import ReminderScheduler
from hydromate.reminders.settings import UserSettings
from hydromate.reminders.store import KEY_LAST_CONGRATULATION_DATE, KeyValueStore

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send(self, message: ReminderMessage) -> None: ...


SettingsProvider = Callable[[], UserSettings]
ProgressProvider = Callable[[UserSettings], HydrationProgress]


class ReminderHandler:
    """Handles fired smart, custom and snooze alarms."""

    def __init__(
        self,
        settings_provider: SettingsProvider,
        progress_provider: ProgressProvider,
        scheduler: ReminderScheduler,
        notifier: Notifier,
        store: KeyValueStore,
    ):
        """
        Args:
            settings_provider: returns the current settings snapshot.
            progress_provider: today's goal progress for a settings snapshot.
            scheduler: used to schedule the next link of each chain.
            notifier: delivers the messages.
            store: remembers the day the congratulation was sent.
        """
        self.settings_provider = settings_provider
        self.progress_provider = progress_provider
        self.scheduler = scheduler
        self.notifier = notifier
        self.store = store

    async def handle(self, tag: AlarmTag) -> None:
        try:
            settings = self.settings_provider()
            if not settings.notifications_enabled:
                logger.debug("Notifications disabled, ignoring %s", tag.identity)
                return

            if not self._is_current(settings, tag):
                logger.info("Dropping stale alarm %s", tag.identity)
                return

            if tag.kind is AlarmKind.SMART:
                await self._handle_smart(settings, tag.index)
            elif tag.kind is AlarmKind.CUSTOM:
                await self._handle_custom(settings, tag)
            elif tag.kind is AlarmKind.SNOOZE:
                await self._handle_snooze(settings)

        except Exception as exc:
            logger.error("Error processing reminder %s: %s", tag.identity, exc)

    def _is_current(self, settings: UserSettings, tag: AlarmTag) -> bool:
        """False when the settings no longer ask for this alarm today."""
        weekday = self.scheduler.now().weekday()
        if tag.kind is AlarmKind.SMART:
            return settings.is_smart_reminder_enabled_for_day(weekday)
        if tag.kind is AlarmKind.CUSTOM:
            return any(
                r.reminder_id == tag.reminder_id
                for r in settings.active_custom_reminders_for_day(weekday)
            )
        return True

    async def _handle_smart(self, settings: UserSettings, index: int) -> None:
        progress = self.progress_provider(settings)

        if progress.is_goal_reached:
            logger.info("Goal reached, skipping smart reminder #%d", index)
            self.scheduler.schedule_next_day_reminder(settings)
            await self._congratulate_once(settings, progress)
            return

        self.scheduler.on_reminder_fired(settings, index)
        await self.notifier.send(self._reminder(settings, progress))

    async def _handle_custom(self, settings: UserSettings, tag: AlarmTag) -> None:
        progress = self.progress_provider(settings)

        self.scheduler.reschedule_custom_reminder(settings, tag.reminder_id)

        await self.notifier.send(messages.custom_reminder(
            current_ml=progress.current,
            goal_ml=progress.goal,
            label=tag.label,
            show_progress=settings.show_progress,
            snooze_minutes=self._snooze_minutes(settings),
        ))

    async def _handle_snooze(self, settings: UserSettings) -> None:
        self.scheduler.clear_snooze()
        progress = self.progress_provider(settings)

        if progress.is_goal_reached:
            logger.info("Goal reached, skipping snoozed reminder")
            await self._congratulate_once(settings, progress)
            return

        await self.notifier.send(self._reminder(settings, progress))

    async def _congratulate_once(self, settings: UserSettings, progress: HydrationProgress) -> None:
        today = self.scheduler.now().date().isoformat()
        if self.store.get(KEY_LAST_CONGRATULATION_DATE) == today:
            return
        await self.notifier.send(messages.goal_achieved(
            current_ml=progress.current,
            goal_ml=progress.goal,
            show_progress=settings.show_progress,
        ))
        self.store.set(KEY_LAST_CONGRATULATION_DATE, today)

    def _reminder(self, settings: UserSettings, progress: HydrationProgress) -> ReminderMessage:
        return messages.hydration_reminder(
            current_ml=progress.current,
            goal_ml=progress.goal,
            show_progress=settings.show_progress,
            snooze_minutes=self._snooze_minutes(settings),
        )

    @staticmethod
    def _snooze_minutes(settings: UserSettings):
        if settings.snooze_enabled and settings.snooze_delay_minutes > 0:
            return settings.snooze_delay_minutes
        return None
