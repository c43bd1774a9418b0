"""
One-shot alarms identified by tag.

An alarm has no handle: it is addressed only by its tag identity
(kind + slot index), so cancelling means rebuilding the same tag and
cancelling by identity. The payload carried by custom reminder tags
(reminder id, label) is not part of the identity.

APSchedulerAlarmSink maps each tag to a date-trigger job whose job id is
the tag identity.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler

logger = logging.getLogger(__name__)

EXACT_MISFIRE_GRACE_SECONDS = 60


class AlarmKind(str, Enum):
    SMART = "smart"
    CUSTOM = "custom"
    SNOOZE = "snooze"


class AlarmPermissionDenied(RuntimeError):
    """Raised by a sink when it may not schedule an exact alarm."""


@dataclass(frozen=True)
class AlarmTag:
    kind: AlarmKind
    index: int = 0
    reminder_id: Optional[str] = field(default=None, compare=False)
    label: Optional[str] = field(default=None, compare=False)

    @property
    def identity(self) -> str:
        if self.kind is AlarmKind.SNOOZE:
            return AlarmKind.SNOOZE.value
        return f"{self.kind.value}-{self.index}"

    @classmethod
    def smart(cls, index: int) -> "AlarmTag":
        return cls(AlarmKind.SMART, index)

    @classmethod
    def custom(cls, index: int, reminder_id: Optional[str] = None, label: Optional[str] = None) -> "AlarmTag":
        return cls(AlarmKind.CUSTOM, index, reminder_id=reminder_id, label=label)

    @classmethod
    def snooze(cls) -> "AlarmTag":
        return cls(AlarmKind.SNOOZE, 0)


class AlarmSink(Protocol):
    def schedule_at(self, when: datetime, tag: AlarmTag, exact: bool = True) -> None:
        """Schedule (or replace) the alarm for tag. May raise AlarmPermissionDenied."""

    def cancel(self, tag: AlarmTag) -> None:
        """Cancel the alarm for tag's identity. Unknown tags are ignored."""


AlarmCallback = Callable[[AlarmTag], Awaitable[None]]


class APSchedulerAlarmSink:
    """
    Alarm sink backed by APScheduler date-trigger jobs.

    Usage:
        sink = APSchedulerAlarmSink(scheduler, exact_allowed=True)
        sink.on_fire = handler.handle   # async callable(tag)
    """

    def __init__(
        self,
        scheduler: BaseScheduler,
        on_fire: Optional[AlarmCallback] = None,
        exact_allowed: bool = True,
    ):
        """
        Args:
            scheduler: APScheduler instance jobs are added to.
            on_fire: coroutine function called with the tag when an alarm fires.
            exact_allowed: when False every exact request is denied.
        """
        self.scheduler = scheduler
        self.on_fire = on_fire
        self.exact_allowed = exact_allowed

    def schedule_at(self, when: datetime, tag: AlarmTag, exact: bool = True) -> None:
        if exact and not self.exact_allowed:
            raise AlarmPermissionDenied(f"exact alarm not allowed for {tag.identity}")

        self.cancel(tag)
        self.scheduler.add_job(
            self._dispatch,
            trigger="date",
            run_date=when,
            id=tag.identity,
            replace_existing=True,
            kwargs={"tag": tag},
            # Inexact alarms still fire, however late the loop wakes up
            misfire_grace_time=EXACT_MISFIRE_GRACE_SECONDS if exact else None,
            coalesce=True,
        )

    def cancel(self, tag: AlarmTag) -> None:
        try:
            self.scheduler.remove_job(tag.identity)
        except JobLookupError:
            pass

    def scheduled_time(self, tag: AlarmTag) -> Optional[datetime]:
        """Naive local run date of the pending alarm for tag, if any."""
        job = self.scheduler.get_job(tag.identity)
        if job is None:
            return None
        return job.trigger.run_date.replace(tzinfo=None)

    async def _dispatch(self, tag: AlarmTag) -> None:
        if self.on_fire is None:
            logger.warning("Alarm %s fired with no handler attached", tag.identity)
            return
        await self.on_fire(tag)
