"""FastAPI application factory."""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from hydromate.api.routes import drinks, entries, hydration, settings as settings_routes
from hydromate.reminders.scheduler import ReminderScheduler


def create_app(engine=None, reminders: Optional[ReminderScheduler] = None) -> FastAPI:
    """
    Build and return the FastAPI app.

    Args:
        engine: SQLAlchemy engine; the configured one is used if None.
        reminders: when set, saving settings reschedules the reminders.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.engine is None:
            from hydromate.db.engine import get_engine
            app.state.engine = get_engine()  # creates tables and migrates
        yield

    app = FastAPI(
        title="HydroMate API",
        description="Hydration tracking and reminder backend",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.reminders = reminders

    app.include_router(entries.router, prefix="/entries", tags=["entries"])
    app.include_router(hydration.router, prefix="/hydration", tags=["hydration"])
    app.include_router(drinks.router, prefix="/drinks", tags=["drinks"])
    app.include_router(settings_routes.router, prefix="/settings", tags=["settings"])

    return app


# Module-level app instance for uvicorn
app = create_app()
