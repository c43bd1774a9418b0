"""SQLModel engine singleton."""
from sqlmodel import SQLModel, create_engine

from hydromate.config import get_settings

_engine = None


def get_engine():
    """Return the module-level engine, creating it on first call."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},  # SQLite only; safe for FastAPI
        )
        # Import all models so metadata is populated before create_all
        from hydromate.models.drink import Drink, DrinkEntry  # noqa
        from hydromate.models.settings import CustomReminderRecord, SettingsRecord  # noqa
        from hydromate.models.scheduler_state import SchedulerState  # noqa
        SQLModel.metadata.create_all(_engine)
        from hydromate.db.migrations import run_migrations
        run_migrations(_engine)
    return _engine
