"""
Reminder message content.

Pure text builders; delivery lives in notifications.telegram.
"""
from dataclasses import dataclass
from typing import Optional

DEFAULT_CUSTOM_LABEL = "Time to hydrate"
SNOOZE_CALLBACK_PREFIX = "snooze:"


@dataclass(frozen=True)
class ReminderMessage:
    title: str
    body: str
    progress_percent: Optional[int] = None  # None when progress is hidden
    snooze_minutes: Optional[int] = None    # None when no snooze button

    def render(self) -> str:
        lines = [self.title, self.body]
        if self.progress_percent is not None:
            lines.append(f"{progress_bar(self.progress_percent)} {self.progress_percent}%")
        return "\n".join(lines)


def progress_bar(percent: int, width: int = 10) -> str:
    filled = max(0, min(width, round(percent / 100 * width)))
    return "▰" * filled + "▱" * (width - filled)


def _percent(current: float, goal: float) -> int:
    if goal <= 0:
        return 100
    return int(max(0.0, min(100.0, current / goal * 100)))


def reminder_content(progress_percent: int, remaining_ml: int):
    """(title, body) for a smart reminder, by how far along the day is."""
    if progress_percent >= 90:
        return "💪 Almost There!", f"You're so close! Just {remaining_ml}ml to reach your goal!"
    if progress_percent >= 75:
        return "🌊 Great Progress!", f"You're doing amazing! {remaining_ml}ml remaining to reach your goal"
    if progress_percent >= 50:
        return "💧 Keep Going!", f"Halfway there! Drink some water - {remaining_ml}ml remaining"
    if progress_percent >= 25:
        return "🥤 Time to Hydrate!", f"Don't forget to drink water! {remaining_ml}ml remaining"
    return "💦 Stay Hydrated!", f"Time for a water break! {remaining_ml}ml to reach your goal"


def hydration_reminder(
    current_ml: float,
    goal_ml: float,
    show_progress: bool = True,
    snooze_minutes: Optional[int] = None,
) -> ReminderMessage:
    percent = _percent(current_ml, goal_ml)
    remaining = int(max(0.0, goal_ml - current_ml))
    title, body = reminder_content(percent, remaining)
    return ReminderMessage(
        title=title,
        body=body,
        progress_percent=percent if show_progress else None,
        snooze_minutes=snooze_minutes or None,
    )


def custom_reminder(
    current_ml: float,
    goal_ml: float,
    label: Optional[str] = None,
    show_progress: bool = True,
    snooze_minutes: Optional[int] = None,
) -> ReminderMessage:
    """Custom reminders are sent even once the goal is reached."""
    percent = _percent(current_ml, goal_ml)
    if current_ml >= goal_ml:
        body = "You've already reached your goal today! Great job! 🎉"
    else:
        remaining = int(goal_ml - current_ml)
        body = f"You've consumed {int(current_ml)}ml. {remaining}ml remaining to reach your goal."
    return ReminderMessage(
        title=f"💧 {label or DEFAULT_CUSTOM_LABEL}",
        body=body,
        progress_percent=percent if show_progress else None,
        snooze_minutes=snooze_minutes or None,
    )


def goal_achieved(current_ml: float, goal_ml: float, show_progress: bool = True) -> ReminderMessage:
    over = int(current_ml - goal_ml)
    if over > 0:
        body = f"You've exceeded your goal by {over}ml! Keep up the amazing work! 💪"
    else:
        body = f"You've reached your daily hydration goal of {int(goal_ml)}ml! Great job staying healthy! 🌟"
    return ReminderMessage(
        title="🎉 Daily Goal Achieved!",
        body=body,
        progress_percent=100 if show_progress else None,
    )


def snooze_confirmation(minutes: int) -> str:
    return f"Reminder snoozed for {minutes} minutes ⏰"
