"""
Scheduler worker for the subscription context.

Usage:
    python -m subscription.worker
"""
from __future__ import annotations

import asyncio
import signal

from shared.config import get_settings
from shared.infrastructure.observability.logger import configure_logging, get_logger
from subscription.infrastructure.module import build_subscription_module

logger = get_logger(__name__)


async def run() -> None:
    settings = get_settings()
    module = build_subscription_module(settings)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    module.scheduler.start()
    logger.info("worker_started", environment=settings.environment)
    try:
        await stop.wait()
    finally:
        await module.close()
        logger.info("worker_stopped")


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.json_logs)
    asyncio.run(run())


if __name__ == "__main__":
    main()
