"""
Persistent key-value store for scheduler bookkeeping.

Holds the schedule memo (last schedule timestamp + settings hash), the
pending snooze timestamp and the last congratulation day. Losing any of it
only costs a redundant reschedule or a repeated message.
"""
from datetime import datetime
from typing import Dict, Optional, Protocol

from sqlmodel import Session

from hydromate.models.scheduler_state import SchedulerState

KEY_LAST_SCHEDULE_TIMESTAMP = "last_schedule_timestamp"
KEY_SCHEDULED_SETTINGS_HASH = "scheduled_settings_hash"
KEY_SNOOZE_SCHEDULED_TIME = "snooze_scheduled_time"
KEY_LAST_CONGRATULATION_DATE = "last_congratulation_date"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Dict-backed store; does not survive a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqlKeyValueStore:
    """Store backed by the SchedulerState table. Last writer wins."""

    def __init__(self, engine):
        """
        Args:
            engine: SQLAlchemy engine (SQLModel create_engine result).
        """
        self.engine = engine

    def get(self, key: str) -> Optional[str]:
        with Session(self.engine) as s:
            row = s.get(SchedulerState, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with Session(self.engine) as s:
            row = s.get(SchedulerState, key)
            if row is None:
                row = SchedulerState(key=key, value=value)
            else:
                row.value = value
                row.updated_at = datetime.utcnow()
            s.add(row)
            s.commit()

    def delete(self, key: str) -> None:
        with Session(self.engine) as s:
            row = s.get(SchedulerState, key)
            if row is not None:
                s.delete(row)
                s.commit()


def get_datetime(store: KeyValueStore, key: str) -> Optional[datetime]:
    """Read an ISO timestamp; unparsable values read as missing."""
    raw = store.get(key)
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def set_datetime(store: KeyValueStore, key: str, value: datetime) -> None:
    store.set(key, value.isoformat())
