"""Request-scoped dependencies shared by the routes."""
from typing import Generator, Optional

from fastapi import Request
from sqlmodel import Session

from hydromate.config import get_settings
from hydromate.reminders.scheduler import ReminderScheduler
from hydromate.reminders.settings import UserSettings
from hydromate.tracking.repository import EntryRepository, SettingsRepository


def get_app_engine(request: Request):
    return request.app.state.engine


def get_app_session(request: Request) -> Generator[Session, None, None]:
    """Session on the app's engine."""
    with Session(get_app_engine(request)) as session:
        yield session


def get_reminders(request: Request) -> Optional[ReminderScheduler]:
    return request.app.state.reminders


def settings_repository(request: Request) -> SettingsRepository:
    return SettingsRepository(get_app_engine(request), user_id=get_settings().user_id)


def entry_repository(request: Request) -> EntryRepository:
    return EntryRepository(get_app_engine(request), user_id=get_settings().user_id)


def current_settings(request: Request) -> UserSettings:
    return settings_repository(request).get()
