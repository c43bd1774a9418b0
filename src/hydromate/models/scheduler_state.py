"""Key-value rows that must survive a process restart."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class SchedulerState(SQLModel, table=True):
    """Schedule cache, pending snooze and similar scheduler bookkeeping."""

    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=datetime.utcnow)
