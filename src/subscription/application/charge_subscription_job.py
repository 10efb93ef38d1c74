"""
ChargeSubscriptionJob
Daily scan of active subscriptions handing the ones due today to the payment queue
"""
from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

from shared.infrastructure.messaging.queue import Message, QueueFactory, QueueOptions
from shared.infrastructure.observability.logger import bound_context, get_logger
from shared.utils.clock import Clock, utc_today
from shared.utils.pagination import LAST_PAGE, PageOptions
from subscription.domain.repositories import (
    ISubscriptionPlanRepository,
    ISubscriptionRepository,
    SubscriptionsFilter,
)
from subscription.domain.subscription import Subscription, SubscriptionStatus
from subscription.domain.subscription_plan import SubscriptionPlan

logger = get_logger(__name__)


class ChargeSubscriptionJob:
    """
    Batch scanner run once per cron tick.

    Pages through ACTIVE subscriptions in ascending page order, loads the
    plans of each page with one batch call and enqueues one charge message
    per subscription whose plan is billed on the date captured at start.
    Any storage or queue failure aborts the run; the next tick re-runs it.
    Eligibility depends only on ``next_billing_date``, so a re-run before
    any activation yields the same messages.
    """

    NAME = "charge_active_subscriptions"
    CRON = "0 0 * * *"
    PAGE_SIZE = 50
    ATTEMPTS = 3
    MESSAGE_NAME = "ChargeActiveSubscription"

    def __init__(
        self,
        subscription_repository: ISubscriptionRepository,
        subscription_plan_repository: ISubscriptionPlanRepository,
        queue_factory: QueueFactory,
        queue_name: str = "payment",
        today: Clock = utc_today,
    ) -> None:
        self._subscription_repository = subscription_repository
        self._subscription_plan_repository = subscription_plan_repository
        self._queue_factory = queue_factory
        self._queue_name = queue_name
        self._today = today

    async def execute(self) -> int:
        """
        Run one full scan.

        Returns:
            Number of charge messages enqueued
        """
        current_date = self._today()
        run_id = uuid4().hex
        pages = 0
        total_messages = 0

        with bound_context(job=self.NAME, run_id=run_id):
            logger.info("charge_job_started", current_date=current_date.isoformat())

            queue = self._queue_factory(QueueOptions(queue_name=self._queue_name, attempts=self.ATTEMPTS))
            try:
                next_page = 1
                while next_page != LAST_PAGE:
                    page = await self._subscription_repository.get_subscriptions(
                        SubscriptionsFilter(
                            status=SubscriptionStatus.ACTIVE,
                            page_options=PageOptions(limit=self.PAGE_SIZE, page=next_page),
                        )
                    )
                    pages += 1

                    messages = await self._build_messages(page.results, current_date)
                    if messages:
                        await queue.add_messages(messages)
                    total_messages += len(messages)

                    logger.info(
                        "charge_page_processed",
                        page=next_page,
                        rows=len(page.results),
                        eligible=len(messages),
                    )

                    if page.page_result is None or page.page_result.next_page <= next_page:
                        next_page = LAST_PAGE
                    else:
                        next_page = page.page_result.next_page
            finally:
                await queue.close()

            logger.info("charge_job_finished", pages=pages, messages=total_messages)
        return total_messages

    async def _build_messages(self, subscriptions: list[Subscription], current_date: date) -> list[Message]:
        if not subscriptions:
            return []

        plan_ids = list(dict.fromkeys(s.subscription_plan_id for s in subscriptions))
        plans = await self._subscription_plan_repository.get_subscription_plans_by_ids(plan_ids)
        plans_by_id: dict[UUID, SubscriptionPlan] = {plan.id: plan for plan in plans}

        messages: list[Message] = []
        for subscription in subscriptions:
            plan: Optional[SubscriptionPlan] = plans_by_id.get(subscription.subscription_plan_id)
            if plan is None:
                logger.warning(
                    "charge_plan_missing",
                    subscription_id=str(subscription.id),
                    subscription_plan_id=str(subscription.subscription_plan_id),
                )
                continue
            if not plan.is_due_on(current_date):
                continue

            messages.append(
                Message(
                    id=str(uuid4()),
                    name=self.MESSAGE_NAME,
                    payload={
                        "subscription_id": str(subscription.id),
                        "subscriber_id": str(subscription.subscriber_id),
                        "tenant_id": str(subscription.tenant_id),
                        "amount": str(plan.amount),
                    },
                )
            )
        return messages
