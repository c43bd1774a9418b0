"""
Settings routes.

Saving settings triggers a reminder reschedule when the app was created
with a ReminderScheduler (the bot process); the memo makes it a no-op when
nothing relevant changed.
"""
import logging
from datetime import time
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import AfterValidator, BaseModel, Field, field_validator, model_validator

from hydromate.api.deps import get_reminders, settings_repository
from hydromate.reminders.settings import (
    ALL_DAYS,
    SNOOZE_DELAYS,
    CustomReminder,
    UserSettings,
)
from hydromate.tracking.repository import DuplicateReminderError, SettingsRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_days(days: List[int]) -> List[int]:
    invalid = [d for d in days if d not in ALL_DAYS]
    if invalid:
        raise ValueError(f"weekdays must be 0 (Monday) to 6 (Sunday), got {invalid}")
    return sorted(set(days))


Weekdays = Annotated[List[int], AfterValidator(_check_days)]


class CustomReminderPayload(BaseModel):
    reminder_id: Optional[str] = None  # assigned on create
    time: time
    label: str = ""
    enabled_days: Weekdays = Field(default_factory=lambda: sorted(ALL_DAYS))
    is_enabled: bool = True


class SettingsPayload(BaseModel):
    daily_goal_ml: int = Field(default=2000, gt=0)
    goal_threshold: float = Field(default=1.0, ge=0.8, le=1.2)
    notifications_enabled: bool = True
    wake_up_time: time = time(8, 0)
    bed_time: time = time(22, 0)
    smart_reminders_enabled: bool = True
    reminder_interval_minutes: int = Field(default=60, gt=0)
    smart_reminder_days: Weekdays = Field(default_factory=lambda: sorted(ALL_DAYS))
    custom_reminders_enabled: bool = False
    custom_reminders: List[CustomReminderPayload] = Field(default_factory=list)
    snooze_enabled: bool = True
    snooze_delay_minutes: int = 10
    show_progress: bool = True

    @field_validator("snooze_delay_minutes")
    @classmethod
    def validate_snooze_delay(cls, value: int) -> int:
        if value not in SNOOZE_DELAYS:
            raise ValueError(f"snooze delay must be one of {SNOOZE_DELAYS}")
        return value

    @model_validator(mode="after")
    def validate_wake_before_bed(self):
        if self.wake_up_time >= self.bed_time:
            raise ValueError("wake_up_time must be before bed_time")
        return self

    @classmethod
    def from_settings(cls, settings: UserSettings) -> "SettingsPayload":
        return cls(
            daily_goal_ml=settings.daily_goal_ml,
            goal_threshold=settings.goal_threshold,
            notifications_enabled=settings.notifications_enabled,
            wake_up_time=settings.wake_up_time,
            bed_time=settings.bed_time,
            smart_reminders_enabled=settings.smart_reminders_enabled,
            reminder_interval_minutes=settings.reminder_interval_minutes,
            smart_reminder_days=sorted(settings.smart_reminder_days),
            custom_reminders_enabled=settings.custom_reminders_enabled,
            custom_reminders=[
                CustomReminderPayload(
                    reminder_id=r.reminder_id,
                    time=r.time,
                    label=r.label,
                    enabled_days=sorted(r.enabled_days),
                    is_enabled=r.is_enabled,
                )
                for r in settings.custom_reminders
            ],
            snooze_enabled=settings.snooze_enabled,
            snooze_delay_minutes=settings.snooze_delay_minutes,
            show_progress=settings.show_progress,
        )

    def to_settings(self) -> UserSettings:
        return UserSettings(
            daily_goal_ml=self.daily_goal_ml,
            goal_threshold=self.goal_threshold,
            notifications_enabled=self.notifications_enabled,
            wake_up_time=self.wake_up_time,
            bed_time=self.bed_time,
            smart_reminders_enabled=self.smart_reminders_enabled,
            reminder_interval_minutes=self.reminder_interval_minutes,
            smart_reminder_days=frozenset(self.smart_reminder_days),
            custom_reminders_enabled=self.custom_reminders_enabled,
            custom_reminders=tuple(
                CustomReminder(
                    reminder_id=r.reminder_id or "",
                    time=r.time,
                    label=r.label,
                    enabled_days=frozenset(r.enabled_days),
                    is_enabled=r.is_enabled,
                )
                for r in self.custom_reminders
            ),
            snooze_enabled=self.snooze_enabled,
            snooze_delay_minutes=self.snooze_delay_minutes,
            show_progress=self.show_progress,
        )


def _reschedule(request: Request, settings: UserSettings) -> None:
    reminders = get_reminders(request)
    if reminders is None:
        return
    try:
        reminders.schedule_notifications(settings)
    except Exception as exc:
        logger.error("Rescheduling after settings change failed: %s", exc)


@router.get("/", response_model=SettingsPayload)
def read_settings(repo: SettingsRepository = Depends(settings_repository)):
    return SettingsPayload.from_settings(repo.get())


@router.put("/", response_model=SettingsPayload)
def update_settings(
    payload: SettingsPayload,
    request: Request,
    repo: SettingsRepository = Depends(settings_repository),
):
    """Replace all settings, including the custom reminder list."""
    reminder_ids = [r.reminder_id for r in payload.custom_reminders if r.reminder_id]
    if len(reminder_ids) != len(set(reminder_ids)):
        raise HTTPException(status_code=422, detail="Duplicate reminder_id")

    saved = repo.save(payload.to_settings())
    _reschedule(request, saved)
    return SettingsPayload.from_settings(saved)


@router.post("/reminders", response_model=CustomReminderPayload, status_code=201)
def add_custom_reminder(
    payload: CustomReminderPayload,
    request: Request,
    repo: SettingsRepository = Depends(settings_repository),
):
    """Append a custom reminder to the list."""
    try:
        reminder = repo.add_custom_reminder(
            payload.time,
            label=payload.label,
            enabled_days=payload.enabled_days,
            reminder_id=payload.reminder_id,
        )
    except DuplicateReminderError:
        raise HTTPException(status_code=409, detail="Reminder already exists")
    _reschedule(request, repo.get())
    return CustomReminderPayload(
        reminder_id=reminder.reminder_id,
        time=reminder.time,
        label=reminder.label,
        enabled_days=sorted(reminder.enabled_days),
        is_enabled=reminder.is_enabled,
    )


@router.delete("/reminders/{reminder_id}", status_code=204)
def delete_custom_reminder(
    reminder_id: str,
    request: Request,
    repo: SettingsRepository = Depends(settings_repository),
):
    if not repo.delete_custom_reminder(reminder_id):
        raise HTTPException(status_code=404, detail="Reminder not found")
    _reschedule(request, repo.get())
    return Response(status_code=204)
