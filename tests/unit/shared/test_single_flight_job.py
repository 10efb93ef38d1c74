import asyncio
from unittest.mock import AsyncMock

import pytest

from shared.infrastructure.scheduling.lock import SingleFlightJob

LOCK = "lock:charge_active_subscriptions"


@pytest.mark.anyio
async def test_runs_job_and_releases_lease(fake_redis):
    job = AsyncMock()
    job.execute.return_value = 7
    guarded = SingleFlightJob(job, fake_redis, LOCK, ttl_seconds=60)

    assert await guarded.execute() == 7
    assert await fake_redis.get(LOCK) is None


@pytest.mark.anyio
async def test_skips_while_lease_is_held(fake_redis):
    await fake_redis.set(LOCK, "other-run", ex=60)
    job = AsyncMock()
    guarded = SingleFlightJob(job, fake_redis, LOCK)

    assert await guarded.execute() is None
    job.execute.assert_not_awaited()
    assert await fake_redis.get(LOCK) == "other-run"


@pytest.mark.anyio
async def test_lease_released_when_job_fails(fake_redis):
    job = AsyncMock()
    job.execute.side_effect = RuntimeError("boom")
    guarded = SingleFlightJob(job, fake_redis, LOCK)

    with pytest.raises(RuntimeError):
        await guarded.execute()
    assert await fake_redis.get(LOCK) is None


@pytest.mark.anyio
async def test_lease_has_ttl(fake_redis):
    guarded = SingleFlightJob(AsyncMock(), fake_redis, LOCK, ttl_seconds=120)
    assert await guarded.acquire_lock("t1")
    assert 0 < await fake_redis.ttl(LOCK) <= 120
    assert not await guarded.acquire_lock("t2")


@pytest.mark.anyio
async def test_only_owner_releases(fake_redis):
    guarded = SingleFlightJob(AsyncMock(), fake_redis, LOCK)
    await guarded.acquire_lock("owner")
    assert not await guarded.release_lock("intruder")
    assert await guarded.release_lock("owner")


@pytest.mark.anyio
async def test_overlapping_triggers_run_once(fake_redis):
    started = asyncio.Event()
    finish = asyncio.Event()

    class SlowJob:
        runs = 0

        async def execute(self):
            SlowJob.runs += 1
            started.set()
            await finish.wait()

    guarded = SingleFlightJob(SlowJob(), fake_redis, LOCK)
    first = asyncio.create_task(guarded.execute())
    await started.wait()
    assert await guarded.execute() is None
    finish.set()
    await first
    assert SlowJob.runs == 1


def test_ttl_must_be_positive():
    with pytest.raises(ValueError):
        SingleFlightJob(AsyncMock(), AsyncMock(), LOCK, ttl_seconds=0)


@pytest.mark.anyio
async def test_expired_owner_does_not_release_successor_lease(fake_redis):
    first = SingleFlightJob(AsyncMock(), fake_redis, LOCK)
    second = SingleFlightJob(AsyncMock(), fake_redis, LOCK)
    assert await first.acquire_lock("run-a")

    await fake_redis.delete(LOCK)  # lease of run-a expired
    assert await second.acquire_lock("run-b")

    assert not await first.release_lock("run-a")
    assert await fake_redis.get(LOCK) == "run-b"


@pytest.mark.anyio
async def test_release_is_a_single_compare_and_delete():
    redis = AsyncMock()
    redis.eval.return_value = 1
    guarded = SingleFlightJob(AsyncMock(), redis, LOCK)

    assert await guarded.release_lock("owner")

    redis.eval.assert_awaited_once_with(SingleFlightJob._UNLOCK_LUA, 1, LOCK, "owner")
    redis.get.assert_not_awaited()
    redis.delete.assert_not_awaited()
