"""
Cron Scheduler Registry
Explicit name -> (cron expression, job) registry run on APScheduler
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class CronJob(Protocol):
    async def execute(self) -> Any:
        ...


@dataclass(frozen=True)
class ScheduledJob:
    name: str
    cron_expression: str
    job: CronJob
    trigger: CronTrigger


class CronScheduler:
    """
    Registry of cron jobs populated at startup.

    Jobs are registered with ``add`` before ``start``; each one runs on the
    event loop with at most one instance in flight per process, and missed
    runs are coalesced into one.
    """

    def __init__(self, timezone: str = "UTC") -> None:
        self._timezone = ZoneInfo(timezone)
        self._jobs: dict[str, ScheduledJob] = {}
        self._scheduler: AsyncIOScheduler | None = None

    def add(self, name: str, cron_expression: str, job: CronJob) -> ScheduledJob:
        """
        Register ``job`` under ``name``.

        Raises:
            ValueError: If the name is taken or the expression is not valid crontab
        """
        if name in self._jobs:
            raise ValueError(f"Job already registered: {name}")
        try:
            trigger = CronTrigger.from_crontab(cron_expression, timezone=self._timezone)
        except ValueError as e:
            raise ValueError(f"Invalid cron expression for {name}: {cron_expression!r} ({e})") from None

        scheduled = ScheduledJob(name=name, cron_expression=cron_expression, job=job, trigger=trigger)
        self._jobs[name] = scheduled
        logger.info("cron_job_registered", job=name, cron=cron_expression)
        return scheduled

    @property
    def jobs(self) -> dict[str, ScheduledJob]:
        return dict(self._jobs)

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def _runner(self, scheduled: ScheduledJob) -> Callable[[], Awaitable[None]]:
        async def run() -> None:
            logger.info("cron_job_triggered", job=scheduled.name)
            try:
                await scheduled.job.execute()
            except Exception:
                # the run is retried wholesale on the next tick
                logger.exception("cron_job_failed", job=scheduled.name)

        return run

    def start(self) -> None:
        """Start the scheduler on the running event loop."""
        if self.running:
            return
        self._scheduler = AsyncIOScheduler(timezone=self._timezone)
        for scheduled in self._jobs.values():
            self._scheduler.add_job(
                self._runner(scheduled),
                scheduled.trigger,
                id=scheduled.name,
                name=scheduled.name,
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )
        self._scheduler.start()
        logger.info("cron_scheduler_started", jobs=sorted(self._jobs), timezone=str(self._timezone))

    def shutdown(self, wait: bool = False) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
        self._scheduler = None
        logger.info("cron_scheduler_stopped")
