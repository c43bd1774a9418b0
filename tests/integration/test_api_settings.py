"""Integration tests for /settings routes."""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from hydromate.api.main import create_app
from hydromate.reminders.scheduler import ReminderScheduler
from hydromate.tracking.repository import SettingsRepository


@pytest.fixture(name="reminders")
def reminders_fixture():
    return MagicMock(spec=ReminderScheduler)


@pytest.fixture(name="client")
def client_fixture(engine, reminders):
    app = create_app(engine=engine, reminders=reminders)
    with TestClient(app) as c:
        yield c


def _payload(**overrides) -> dict:
    payload = {
        "daily_goal_ml": 2500,
        "goal_threshold": 1.0,
        "notifications_enabled": True,
        "wake_up_time": "07:00:00",
        "bed_time": "22:30:00",
        "smart_reminders_enabled": True,
        "reminder_interval_minutes": 90,
        "smart_reminder_days": [0, 1, 2, 3, 4],
        "custom_reminders_enabled": True,
        "custom_reminders": [
            {"time": "12:30:00", "label": "Lunch", "enabled_days": [0, 2, 4]},
        ],
        "snooze_enabled": True,
        "snooze_delay_minutes": 15,
        "show_progress": True,
    }
    payload.update(overrides)
    return payload


class TestReadSettings:
    def test_defaults(self, client):
        resp = client.get("/settings/")
        assert resp.status_code == 200
        body = resp.json()
        assert body["daily_goal_ml"] == 2000
        assert body["wake_up_time"] == "08:00:00"
        assert body["smart_reminder_days"] == [0, 1, 2, 3, 4, 5, 6]
        assert body["custom_reminders"] == []


class TestUpdateSettings:
    def test_saves_and_returns(self, client, engine):
        resp = client.put("/settings/", json=_payload())
        assert resp.status_code == 200
        body = resp.json()
        assert body["daily_goal_ml"] == 2500
        assert body["custom_reminders"][0]["reminder_id"]
        assert body["custom_reminders"][0]["enabled_days"] == [0, 2, 4]

        saved = SettingsRepository(engine).get()
        assert saved.reminder_interval_minutes == 90
        assert saved.smart_reminder_days == frozenset({0, 1, 2, 3, 4})

    def test_triggers_reschedule(self, client, reminders, engine):
        client.put("/settings/", json=_payload())
        reminders.schedule_notifications.assert_called_once_with(SettingsRepository(engine).get())

    def test_reschedule_failure_still_saves(self, client, reminders):
        reminders.schedule_notifications.side_effect = RuntimeError("alarm host gone")
        assert client.put("/settings/", json=_payload()).status_code == 200

    @pytest.mark.parametrize("overrides", [
        {"goal_threshold": 0.5},
        {"goal_threshold": 1.5},
        {"snooze_delay_minutes": 7},
        {"reminder_interval_minutes": 0},
        {"daily_goal_ml": 0},
        {"smart_reminder_days": [7]},
        {"wake_up_time": "23:00:00"},
        {"custom_reminders": [{"time": "12:00:00", "enabled_days": [-1]}]},
    ])
    def test_rejects_invalid(self, client, reminders, overrides):
        assert client.put("/settings/", json=_payload(**overrides)).status_code == 422
        reminders.schedule_notifications.assert_not_called()

    def test_rejects_duplicate_reminder_ids(self, client):
        reminders = [
            {"reminder_id": "x", "time": "09:00:00"},
            {"reminder_id": "x", "time": "10:00:00"},
        ]
        assert client.put("/settings/", json=_payload(custom_reminders=reminders)).status_code == 422

    def test_without_reminder_scheduler(self, engine):
        app = create_app(engine=engine)
        with TestClient(app) as c:
            assert c.put("/settings/", json=_payload()).status_code == 200


class TestCustomReminderRoutes:
    def test_add(self, client, engine, reminders):
        resp = client.post("/settings/reminders", json={"time": "15:00:00", "label": "Tea time"})
        assert resp.status_code == 201
        assert resp.json()["reminder_id"]
        assert [r.label for r in SettingsRepository(engine).get().custom_reminders] == ["Tea time"]
        reminders.schedule_notifications.assert_called_once()

    def test_add_duplicate_id(self, client, engine):
        first = client.post("/settings/reminders", json={"reminder_id": "x", "time": "12:00:00"})
        second = client.post("/settings/reminders", json={"reminder_id": "x", "time": "13:00:00"})

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["detail"] == "Reminder already exists"
        assert len(SettingsRepository(engine).get().custom_reminders) == 1

    def test_delete(self, client, engine):
        reminder_id = client.post("/settings/reminders", json={"time": "15:00:00"}).json()["reminder_id"]
        assert client.delete(f"/settings/reminders/{reminder_id}").status_code == 204
        assert SettingsRepository(engine).get().custom_reminders == ()

    def test_delete_missing(self, client):
        assert client.delete("/settings/reminders/nope").status_code == 404
