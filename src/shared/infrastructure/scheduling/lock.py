"""
Single-flight guard for scheduled jobs
Redis lease (SET NX EX) so one run executes at a time across processes
"""
from __future__ import annotations

from typing import Any, Optional
from uuid import uuid4

from redis.asyncio import Redis

from shared.infrastructure.observability.logger import get_logger
from shared.infrastructure.scheduling.scheduler import CronJob

logger = get_logger(__name__)


class SingleFlightJob:
    """
    Wraps a job so overlapping triggers never run it concurrently.

    The lease expires after ``ttl_seconds`` so a crashed run cannot block
    the job forever. It is released only by its owner.
    """

    _UNLOCK_LUA = """
    -- KEYS[1] = lease key
    -- ARGV[1] = owner token
    if redis.call('GET', KEYS[1]) == ARGV[1] then
      return redis.call('DEL', KEYS[1])
    else
      return 0
    end
    """

    def __init__(self, job: CronJob, redis: Redis, lock_key: str, ttl_seconds: int = 3600) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self._job = job
        self._redis = redis
        self._lock_key = lock_key
        self._ttl_seconds = ttl_seconds

    @property
    def lock_key(self) -> str:
        return self._lock_key

    async def acquire_lock(self, token: str) -> bool:
        acquired = await self._redis.set(self._lock_key, token, ex=self._ttl_seconds, nx=True)
        return bool(acquired)

    async def release_lock(self, token: str) -> bool:
        """Delete the lease only if ``token`` still owns it, in one atomic step."""
        return await self._redis.eval(self._UNLOCK_LUA, 1, self._lock_key, token) == 1

    async def execute(self) -> Optional[Any]:
        """
        Run the wrapped job if the lease is free.

        Returns:
            The job's result, or None when another run holds the lease
        """
        token = uuid4().hex
        if not await self.acquire_lock(token):
            logger.warning("job_skipped_lease_held", lock_key=self._lock_key)
            return None

        try:
            return await self._job.execute()
        finally:
            if not await self.release_lock(token):
                logger.warning("job_lease_lost", lock_key=self._lock_key)
