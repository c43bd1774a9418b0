"""Shared test fixtures."""
from datetime import datetime
from typing import Dict, Generator, List, Optional, Tuple

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel.metadata knows about them
from hydromate.models.drink import Drink, DrinkEntry  # noqa: F401
from hydromate.models.scheduler_state import SchedulerState  # noqa: F401
from hydromate.models.settings import CustomReminderRecord, SettingsRecord  # noqa: F401
from hydromate.reminders.alarms import AlarmPermissionDenied, AlarmTag
from hydromate.reminders.scheduler import ReminderScheduler
from hydromate.reminders.store import InMemoryKeyValueStore
from hydromate.tracking.repository import DrinkRepository


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="test_session")
def test_session_fixture(engine) -> Generator[Session, None, None]:
    """Provides a DB session connected to in-memory SQLite."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="seeded_engine")
def seeded_engine_fixture(engine):
    """Engine with the default drink catalogue (Water has id 1)."""
    DrinkRepository(engine).seed_defaults()
    return engine


class FakeAlarmSink:
    """
    Records alarms by tag identity, like a real alarm host.

    deny_exact: every exact request raises AlarmPermissionDenied.
    fail_on: identities whose scheduling raises RuntimeError.
    """

    def __init__(self, deny_exact: bool = False):
        self.deny_exact = deny_exact
        self.fail_on = set()
        self.alarms: Dict[str, Tuple[datetime, AlarmTag, bool]] = {}
        self.requests: List[Tuple[datetime, AlarmTag, bool]] = []

    def schedule_at(self, when: datetime, tag: AlarmTag, exact: bool = True) -> None:
        self.requests.append((when, tag, exact))
        if tag.identity in self.fail_on:
            raise RuntimeError(f"alarm host rejected {tag.identity}")
        if exact and self.deny_exact:
            raise AlarmPermissionDenied(tag.identity)
        self.alarms[tag.identity] = (when, tag, exact)

    def cancel(self, tag: AlarmTag) -> None:
        self.alarms.pop(tag.identity, None)

    def when(self, identity: str) -> Optional[datetime]:
        entry = self.alarms.get(identity)
        return entry[0] if entry else None

    def times(self, prefix: str = "") -> List[datetime]:
        return sorted(w for key, (w, _, _) in self.alarms.items() if key.startswith(prefix))


class FakeClock:
    """Settable clock; call it to read the time."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(name="sink")
def sink_fixture() -> FakeAlarmSink:
    return FakeAlarmSink()


@pytest.fixture(name="store")
def store_fixture() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    # Wednesday
    return FakeClock(datetime(2025, 1, 15, 15, 0))


@pytest.fixture(name="reminders")
def reminders_fixture(sink, store, clock) -> ReminderScheduler:
    return ReminderScheduler(alarms=sink, store=store, clock=clock)
