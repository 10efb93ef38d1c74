"""
Shared Scheduling Infrastructure
Cron registry and the single-flight job guard
"""
from shared.infrastructure.scheduling.lock import SingleFlightJob
from shared.infrastructure.scheduling.scheduler import CronJob, CronScheduler, ScheduledJob

__all__ = ["CronJob", "CronScheduler", "ScheduledJob", "SingleFlightJob"]
