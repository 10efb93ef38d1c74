from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import fakeredis.aioredis
import pytest

from shared.infrastructure.database.base_model import Base
from shared.infrastructure.database.session import DatabaseSessionFactory
from subscription.domain.subscription import Subscription, SubscriptionStatus
from subscription.domain.subscription_plan import Item, RecurrenceType, SubscriptionPlan

# register the subscription tables on Base.metadata
import subscription.infrastructure.models  # noqa: F401


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def fake_redis(anyio_backend):
    client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
async def session_factory(anyio_backend):
    factory = DatabaseSessionFactory("sqlite+aiosqlite:///:memory:")
    async with factory.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield factory
    await factory.dispose()


def make_subscription(status=SubscriptionStatus.ACTIVE, **kwargs):
    started = status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.PAUSED, SubscriptionStatus.FINISHED)
    kwargs.setdefault("subscriber_id", uuid4())
    kwargs.setdefault("subscription_plan_id", uuid4())
    kwargs.setdefault("tenant_id", uuid4())
    if started:
        kwargs.setdefault("started_at", datetime(2024, 1, 1, tzinfo=timezone.utc))
    return Subscription(status=status, **kwargs)


def make_plan(next_billing_date=None, recurrence_type=RecurrenceType.MONTHLY, **kwargs):
    kwargs.setdefault("tenant_id", uuid4())
    kwargs.setdefault("amount", Decimal("49.90"))
    kwargs.setdefault("items", [Item(id=uuid4(), name="Gym access")])
    return SubscriptionPlan(recurrence_type=recurrence_type, next_billing_date=next_billing_date, **kwargs)


TODAY = date(2024, 3, 15)
