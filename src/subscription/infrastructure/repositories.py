"""
SQLAlchemy repositories of the subscription context
"""
from __future__ import annotations

from typing import Optional, Sequence
from uuid import UUID

from shared.infrastructure.database.base_model import as_utc
from shared.infrastructure.database.session import DatabaseSessionFactory
from shared.infrastructure.database.sqlalchemy_repository import SQLAlchemyRepository
from shared.utils.pagination import PaginatedResult
from subscription.domain.repositories import SubscriptionPlansFilter, SubscriptionsFilter
from subscription.domain.subscription import Subscription, SubscriptionStatus
from subscription.domain.subscription_plan import Item, RecurrenceType, SubscriptionPlan
from subscription.infrastructure.models import (
    SubscriptionModel,
    SubscriptionPlanItemModel,
    SubscriptionPlanModel,
)


class SQLAlchemySubscriptionRepository(SQLAlchemyRepository[Subscription, SubscriptionModel]):
    def __init__(self, session_factory: DatabaseSessionFactory) -> None:
        super().__init__(session_factory, SubscriptionModel, Subscription)

    def _to_entity(self, model: SubscriptionModel) -> Subscription:
        return Subscription(
            id=model.id,
            subscriber_id=model.subscriber_id,
            subscription_plan_id=model.subscription_plan_id,
            tenant_id=model.tenant_id,
            status=SubscriptionStatus(model.status),
            started_at=as_utc(model.started_at),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    def _to_model(self, entity: Subscription) -> SubscriptionModel:
        return SubscriptionModel(
            id=entity.id,
            subscriber_id=entity.subscriber_id,
            subscription_plan_id=entity.subscription_plan_id,
            tenant_id=entity.tenant_id,
            status=entity.status.value,
            started_at=entity.started_at,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def get_subscriptions(self, filter: SubscriptionsFilter) -> PaginatedResult[Subscription]:
        criteria = []
        if filter.status is not None:
            criteria.append(SubscriptionModel.status == SubscriptionStatus(filter.status).value)
        if filter.tenant_id is not None:
            criteria.append(SubscriptionModel.tenant_id == filter.tenant_id)
        return await self.find_page(criteria, filter.page_options)

    async def get_subscription_by_id(self, subscription_id: UUID) -> Optional[Subscription]:
        return await self.get_by_id(subscription_id)

    async def create_subscription(self, subscription: Subscription) -> None:
        await self.add(subscription)

    async def update_subscription(self, subscription: Subscription) -> None:
        await self.update_values(
            subscription.id,
            {
                "status": subscription.status.value,
                "started_at": subscription.started_at,
                "updated_at": subscription.updated_at,
            },
        )


class SQLAlchemySubscriptionPlanRepository(SQLAlchemyRepository[SubscriptionPlan, SubscriptionPlanModel]):
    def __init__(self, session_factory: DatabaseSessionFactory) -> None:
        super().__init__(session_factory, SubscriptionPlanModel, SubscriptionPlan)

    def _to_entity(self, model: SubscriptionPlanModel) -> SubscriptionPlan:
        return SubscriptionPlan(
            id=model.id,
            tenant_id=model.tenant_id,
            amount=model.amount,
            recurrence_type=RecurrenceType(model.recurrence_type),
            items=[Item(id=item.item_id, name=item.name) for item in model.items],
            term_url=model.term_url,
            billing_day=model.billing_day,
            next_billing_date=model.next_billing_date,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    def _to_model(self, entity: SubscriptionPlan) -> SubscriptionPlanModel:
        return SubscriptionPlanModel(
            id=entity.id,
            tenant_id=entity.tenant_id,
            amount=entity.amount,
            recurrence_type=entity.recurrence_type.value,
            term_url=entity.term_url,
            billing_day=entity.billing_day,
            next_billing_date=entity.next_billing_date,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            items=[
                SubscriptionPlanItemModel(item_id=item.id, name=item.name, position=position)
                for position, item in enumerate(entity.items)
            ],
        )

    async def get_subscription_plans(self, filter: SubscriptionPlansFilter) -> PaginatedResult[SubscriptionPlan]:
        criteria = []
        if filter.tenant_id is not None:
            criteria.append(SubscriptionPlanModel.tenant_id == filter.tenant_id)
        return await self.find_page(criteria, filter.page_options)

    async def get_subscription_plans_by_ids(self, ids: Sequence[UUID]) -> list[SubscriptionPlan]:
        return await self.get_by_ids(ids)

    async def get_subscription_plan_by_id(self, plan_id: UUID) -> Optional[SubscriptionPlan]:
        return await self.get_by_id(plan_id)

    async def create_subscription_plan(self, plan: SubscriptionPlan) -> None:
        await self.add(plan)

    async def update_subscription_plan(self, plan: SubscriptionPlan) -> None:
        await self.update_values(
            plan.id,
            {
                "next_billing_date": plan.next_billing_date,
                "billing_day": plan.billing_day,
                "term_url": plan.term_url,
                "updated_at": plan.updated_at,
            },
        )
