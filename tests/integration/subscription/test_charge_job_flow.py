import json
from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from conftest import TODAY, make_plan, make_subscription
from shared.application.commands import (
    CatalogItemData,
    GetCatalogItemCommand,
    GetSubscriberCommand,
    UpdateSubscriptionCommand,
    UserExistsCommand,
)
from shared.application.mediator import Mediator
from shared.infrastructure.messaging.redis_queue import RedisQueue, RedisQueueConsumer
from subscription.application.charge_subscription_job import ChargeSubscriptionJob
from subscription.application.subscription_service import SubscriptionService
from subscription.application.update_subscription_command_handler import UpdateSubscriptionCommandHandler
from subscription.domain.subscription import SubscriptionStatus
from subscription.domain.subscription_plan import RecurrenceType
from subscription.infrastructure.repositories import (
    SQLAlchemySubscriptionPlanRepository,
    SQLAlchemySubscriptionRepository,
)


@pytest.fixture
def subscriptions(session_factory):
    return SQLAlchemySubscriptionRepository(session_factory)


@pytest.fixture
def plans(session_factory):
    return SQLAlchemySubscriptionPlanRepository(session_factory)


def _job(subscriptions, plans, redis, today):
    return ChargeSubscriptionJob(
        subscriptions,
        plans,
        lambda options: RedisQueue(redis, options),
        today=lambda: today,
    )


async def _queued(redis, name="payment"):
    return [json.loads(raw) for raw in await redis.lrange(name, 0, -1)]


@pytest.mark.anyio
async def test_due_active_subscriptions_reach_the_payment_queue(subscriptions, plans, fake_redis):
    due = make_plan(next_billing_date=TODAY, amount=Decimal("49.90"))
    tomorrow = make_plan(next_billing_date=TODAY + timedelta(days=1))
    for plan in (due, tomorrow):
        await plans.create_subscription_plan(plan)

    billed = make_subscription(subscription_plan_id=due.id)
    for sub in (
        billed,
        make_subscription(subscription_plan_id=tomorrow.id),
        make_subscription(SubscriptionStatus.PAUSED, subscription_plan_id=due.id),
        make_subscription(SubscriptionStatus.PENDING, subscription_plan_id=due.id),
    ):
        await subscriptions.create_subscription(sub)

    count = await _job(subscriptions, plans, fake_redis, TODAY).execute()

    assert count == 1
    (envelope,) = await _queued(fake_redis)
    assert envelope["name"] == "ChargeActiveSubscription"
    assert envelope["attempts"] == 3
    assert envelope["payload"] == {
        "subscription_id": str(billed.id),
        "subscriber_id": str(billed.subscriber_id),
        "tenant_id": str(billed.tenant_id),
        "amount": "49.90",
    }


@pytest.mark.anyio
async def test_scan_crosses_page_boundaries(subscriptions, plans, fake_redis, monkeypatch):
    monkeypatch.setattr(ChargeSubscriptionJob, "PAGE_SIZE", 2)
    plan = make_plan(next_billing_date=TODAY)
    await plans.create_subscription_plan(plan)
    for _ in range(5):
        await subscriptions.create_subscription(make_subscription(subscription_plan_id=plan.id))

    assert await _job(subscriptions, plans, fake_redis, TODAY).execute() == 5
    assert len({e["payload"]["subscription_id"] for e in await _queued(fake_redis)}) == 5


@pytest.mark.anyio
async def test_lifecycle_from_plan_to_charge(subscriptions, plans, fake_redis):
    tenant_id, subscriber_id = uuid4(), uuid4()
    catalog_item = CatalogItemData(id=uuid4(), name="Gym access", amount=Decimal("59.90"))

    mediator = Mediator()
    mediator.register(GetCatalogItemCommand, AsyncMock(return_value=catalog_item))
    mediator.register(UserExistsCommand, AsyncMock(return_value=True))
    mediator.register(GetSubscriberCommand, AsyncMock(return_value={"id": subscriber_id}))
    mediator.register(UpdateSubscriptionCommand, UpdateSubscriptionCommandHandler(subscriptions, plans))
    service = SubscriptionService(subscriptions, plans, mediator)

    plan = (
        await service.create_subscription_plan(tenant_id, [catalog_item.id], RecurrenceType.MONTHLY)
    ).unwrap()
    subscription = (await service.create_subscription(subscriber_id, plan.id, tenant_id)).unwrap()

    # pending subscriptions are never charged
    assert await _job(subscriptions, plans, fake_redis, TODAY).execute() == 0

    assert (await service.activate_subscription(subscription.id)).is_success()
    stored_plan = await plans.get_subscription_plan_by_id(plan.id)
    stored_subscription = await subscriptions.get_subscription_by_id(subscription.id)
    assert stored_subscription.status == SubscriptionStatus.ACTIVE
    assert stored_subscription.started_at is not None
    assert stored_plan.next_billing_date is not None

    due_date = stored_plan.next_billing_date
    assert await _job(subscriptions, plans, fake_redis, due_date - timedelta(days=1)).execute() == 0
    assert await _job(subscriptions, plans, fake_redis, due_date).execute() == 1

    charged = []

    async def charge(message):
        charged.append(message)

    assert await RedisQueueConsumer(fake_redis, "payment", charge).process_next()
    assert charged[0].payload["subscription_id"] == str(subscription.id)
    assert charged[0].payload["amount"] == "59.90"


@pytest.mark.anyio
async def test_paused_subscription_is_not_charged(subscriptions, plans, fake_redis):
    plan = make_plan(next_billing_date=TODAY)
    await plans.create_subscription_plan(plan)
    sub = make_subscription(subscription_plan_id=plan.id)
    await subscriptions.create_subscription(sub)

    mediator = Mediator()
    mediator.register(UpdateSubscriptionCommand, UpdateSubscriptionCommandHandler(subscriptions, plans))
    service = SubscriptionService(subscriptions, plans, mediator)
    assert (await service.pause_subscription(sub.id, reason="travel")).is_success()

    assert await _job(subscriptions, plans, fake_redis, TODAY).execute() == 0
    assert await fake_redis.llen("payment") == 0
