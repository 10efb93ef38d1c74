"""
Explicit wiring of the subscription context
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from redis.asyncio import Redis

from shared.application.commands import UpdateSubscriptionCommand
from shared.application.mediator import Mediator
from shared.config import Settings
from shared.infrastructure.database.session import DatabaseSessionFactory
from shared.infrastructure.messaging.queue import Queue, QueueOptions
from shared.infrastructure.messaging.redis_queue import RedisQueue
from shared.infrastructure.observability.logger import get_logger
from shared.infrastructure.scheduling.lock import SingleFlightJob
from shared.infrastructure.scheduling.scheduler import CronScheduler
from shared.utils.clock import zoned_today
from subscription.application.charge_subscription_job import ChargeSubscriptionJob
from subscription.application.ports import EmailService, FileStorage
from subscription.application.subscription_service import SubscriptionService
from subscription.application.update_subscription_command_handler import UpdateSubscriptionCommandHandler
from subscription.infrastructure.repositories import (
    SQLAlchemySubscriptionPlanRepository,
    SQLAlchemySubscriptionRepository,
)

logger = get_logger(__name__)


@dataclass
class SubscriptionModule:
    session_factory: DatabaseSessionFactory
    redis: Redis
    mediator: Mediator
    subscription_repository: SQLAlchemySubscriptionRepository
    subscription_plan_repository: SQLAlchemySubscriptionPlanRepository
    update_subscription_handler: UpdateSubscriptionCommandHandler
    subscription_service: SubscriptionService
    charge_subscription_job: ChargeSubscriptionJob
    scheduler: CronScheduler

    async def close(self) -> None:
        self.scheduler.shutdown()
        await self.redis.aclose()
        await self.session_factory.dispose()


def build_subscription_module(
    settings: Settings,
    *,
    mediator: Optional[Mediator] = None,
    redis: Optional[Redis] = None,
    session_factory: Optional[DatabaseSessionFactory] = None,
    email_service: Optional[EmailService] = None,
    file_storage: Optional[FileStorage] = None,
) -> SubscriptionModule:
    """
    Construct repositories, handler, service, charge job and scheduler.

    Collaborators that tests or sibling modules provide (mediator, Redis
    client, session factory, outbound ports) can be passed in; the rest is
    built from ``settings``.
    """
    mediator = mediator or Mediator()
    redis = redis or Redis.from_url(settings.redis_url, decode_responses=True)
    session_factory = session_factory or DatabaseSessionFactory(
        settings.database_url,
        echo=settings.debug,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )

    # billing dates follow the calendar of the zone the cron fires in
    today = zoned_today(settings.scheduler_timezone)

    subscription_repository = SQLAlchemySubscriptionRepository(session_factory)
    subscription_plan_repository = SQLAlchemySubscriptionPlanRepository(session_factory)

    update_subscription_handler = UpdateSubscriptionCommandHandler(
        subscription_repository,
        subscription_plan_repository,
        email_service,
        today=today,
    )
    mediator.register(UpdateSubscriptionCommand, update_subscription_handler)

    subscription_service = SubscriptionService(
        subscription_repository,
        subscription_plan_repository,
        mediator,
        file_storage,
    )

    def queue_factory(options: QueueOptions) -> Queue:
        return RedisQueue.from_url(settings.redis_url, options)

    charge_subscription_job = ChargeSubscriptionJob(
        subscription_repository,
        subscription_plan_repository,
        queue_factory,
        queue_name=settings.payment_queue_name,
        today=today,
    )

    scheduler = CronScheduler(timezone=settings.scheduler_timezone)
    scheduler.add(
        ChargeSubscriptionJob.NAME,
        settings.charge_job_cron,
        SingleFlightJob(
            charge_subscription_job,
            redis,
            lock_key=f"lock:{ChargeSubscriptionJob.NAME}",
            ttl_seconds=settings.charge_job_lock_ttl_seconds,
        ),
    )

    logger.info("subscription_module_built", payment_queue=settings.payment_queue_name)
    return SubscriptionModule(
        session_factory=session_factory,
        redis=redis,
        mediator=mediator,
        subscription_repository=subscription_repository,
        subscription_plan_repository=subscription_plan_repository,
        update_subscription_handler=update_subscription_handler,
        subscription_service=subscription_service,
        charge_subscription_job=charge_subscription_job,
        scheduler=scheduler,
    )
