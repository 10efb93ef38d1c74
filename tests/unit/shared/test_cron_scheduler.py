from unittest.mock import AsyncMock

import pytest

from shared.infrastructure.scheduling.scheduler import CronScheduler


def test_register_job():
    scheduler = CronScheduler(timezone="America/Sao_Paulo")
    job = AsyncMock()
    scheduled = scheduler.add("charge_active_subscriptions", "0 0 * * *", job)
    assert scheduled.job is job
    assert list(scheduler.jobs) == ["charge_active_subscriptions"]
    assert not scheduler.running


def test_duplicate_name_rejected():
    scheduler = CronScheduler()
    scheduler.add("charge", "0 0 * * *", AsyncMock())
    with pytest.raises(ValueError):
        scheduler.add("charge", "0 1 * * *", AsyncMock())


def test_invalid_cron_rejected():
    with pytest.raises(ValueError):
        CronScheduler().add("charge", "not a cron", AsyncMock())


@pytest.mark.anyio
async def test_start_and_shutdown():
    scheduler = CronScheduler()
    scheduler.add("charge", "0 0 * * *", AsyncMock())
    scheduler.start()
    try:
        assert scheduler.running
    finally:
        scheduler.shutdown()
    assert not scheduler.running


@pytest.mark.anyio
async def test_failed_run_does_not_escape():
    scheduler = CronScheduler()
    job = AsyncMock()
    job.execute.side_effect = RuntimeError("db down")
    scheduled = scheduler.add("charge", "0 0 * * *", job)

    await scheduler._runner(scheduled)()

    job.execute.assert_awaited_once()
