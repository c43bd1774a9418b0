"""Tests for the UserSettings snapshot, weekday helpers and settings hash."""
from dataclasses import replace
from datetime import time

from hydromate.reminders.settings import (
    ALL_DAYS,
    CustomReminder,
    UserSettings,
    format_days,
    parse_days,
    settings_hash,
)

LUNCH = CustomReminder(reminder_id="lunch", time=time(12, 30), label="Lunch", enabled_days=frozenset({0, 2}))


class TestWeekdays:
    def test_parse(self):
        assert parse_days("0,2,4") == frozenset({0, 2, 4})

    def test_parse_empty(self):
        assert parse_days("") == frozenset()

    def test_format_is_sorted(self):
        assert format_days({4, 0, 2}) == "0,2,4"

    def test_all_days(self):
        assert parse_days(format_days(ALL_DAYS)) == ALL_DAYS


class TestUserSettings:
    def test_smart_enabled_for_day(self):
        settings = UserSettings(smart_reminder_days=frozenset({0}))
        assert settings.is_smart_reminder_enabled_for_day(0)
        assert not settings.is_smart_reminder_enabled_for_day(1)
        assert not replace(settings, notifications_enabled=False).is_smart_reminder_enabled_for_day(0)

    def test_active_custom_reminders(self):
        settings = UserSettings(custom_reminders_enabled=True, custom_reminders=(LUNCH,))
        assert settings.active_custom_reminders_for_day(2) == (LUNCH,)
        assert settings.active_custom_reminders_for_day(3) == ()

    def test_custom_reminders_off(self):
        settings = UserSettings(custom_reminders_enabled=False, custom_reminders=(LUNCH,))
        assert settings.active_custom_reminders_for_day(2) == ()

    def test_has_active_reminders(self):
        settings = UserSettings(
            smart_reminders_enabled=False,
            custom_reminders_enabled=True,
            custom_reminders=(LUNCH,),
        )
        assert settings.has_active_reminders_for_day(0)
        assert not settings.has_active_reminders_for_day(1)

    def test_disabled_custom_reminder(self):
        assert not replace(LUNCH, is_enabled=False).is_enabled_for_day(0)

    def test_find_custom_reminder(self):
        settings = UserSettings(custom_reminders=(LUNCH,))
        assert settings.find_custom_reminder("lunch") is LUNCH
        assert settings.find_custom_reminder("dinner") is None


class TestSettingsHash:
    def test_stable(self):
        assert settings_hash(UserSettings()) == settings_hash(UserSettings())

    def test_changes_with_schedule_fields(self):
        base = UserSettings()
        assert settings_hash(base) != settings_hash(replace(base, wake_up_time=time(7, 0)))
        assert settings_hash(base) != settings_hash(replace(base, custom_reminders=(LUNCH,)))

    def test_ignores_goal_and_display(self):
        base = UserSettings()
        assert settings_hash(base) == settings_hash(replace(base, daily_goal_ml=3000, show_progress=False))

    def test_day_order_does_not_matter(self):
        a = UserSettings(smart_reminder_days=frozenset([0, 1, 2]))
        b = UserSettings(smart_reminder_days=frozenset([2, 1, 0]))
        assert settings_hash(a) == settings_hash(b)
