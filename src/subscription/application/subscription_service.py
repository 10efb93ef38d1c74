"""
SubscriptionService
Use cases for subscriptions and plans; expected business failures come back as Failure
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence
from uuid import UUID

from shared.application.commands import (
    CatalogItemData,
    GetCatalogItemCommand,
    GetSubscriberCommand,
    UpdateSubscriptionCommand,
    UserExistsCommand,
)
from shared.application.mediator import Mediator
from shared.domain.result import Failure, Result, Success
from shared.exceptions import DomainError, NotFoundError
from shared.infrastructure.observability.logger import get_logger
from shared.utils.pagination import PaginatedResult
from subscription.application.ports import FileStorage, StoredFile
from subscription.domain.repositories import (
    ISubscriptionPlanRepository,
    ISubscriptionRepository,
    SubscriptionPlansFilter,
    SubscriptionsFilter,
)
from subscription.domain.subscription import Subscription
from subscription.domain.subscription_plan import Item, RecurrenceType, SubscriptionPlan

logger = get_logger(__name__)

TERMS_FOLDER = "subscription_terms"


class SubscriptionService:
    """
    Application service for the subscription context.

    Sibling modules (subscriber, company, catalog) are reached only through
    the Mediator. Activation and pause go through ``UpdateSubscriptionCommand``
    so the billing-date advance has a single call site.
    """

    def __init__(
        self,
        subscription_repository: ISubscriptionRepository,
        subscription_plan_repository: ISubscriptionPlanRepository,
        mediator: Mediator,
        file_storage: Optional[FileStorage] = None,
    ) -> None:
        self._subscription_repository = subscription_repository
        self._subscription_plan_repository = subscription_plan_repository
        self._mediator = mediator
        self._file_storage = file_storage

    async def create_subscription(
        self,
        subscriber_id: UUID,
        subscription_plan_id: UUID,
        tenant_id: UUID,
    ) -> Result[Subscription, DomainError]:
        """Validate subscriber, tenant and plan (in that order), then persist a PENDING subscription."""
        subscriber = await self._mediator.send(GetSubscriberCommand(subscriber_id=subscriber_id))
        if not subscriber:
            return Failure(NotFoundError("notfound.subscriber"))

        tenant_exists = await self._mediator.send(UserExistsCommand(user_id=tenant_id))
        if not tenant_exists:
            return Failure(NotFoundError("notfound.company"))

        plan = await self._subscription_plan_repository.get_subscription_plan_by_id(subscription_plan_id)
        if plan is None:
            return Failure(NotFoundError("notfound.subscription_plan"))

        subscription = Subscription.create_pending(
            subscriber_id=subscriber_id,
            subscription_plan_id=subscription_plan_id,
            tenant_id=tenant_id,
        )
        await self._subscription_repository.create_subscription(subscription)
        logger.info("subscription_created", subscription_id=str(subscription.id), tenant_id=str(tenant_id))
        return Success(subscription)

    async def activate_subscription(self, subscription_id: UUID) -> Result[None, DomainError]:
        return await self._update_subscription(UpdateSubscriptionCommand(subscription_id=subscription_id))

    async def pause_subscription(
        self,
        subscription_id: UUID,
        reason: Optional[str] = None,
        customer_email: Optional[str] = None,
    ) -> Result[None, DomainError]:
        return await self._update_subscription(
            UpdateSubscriptionCommand(
                subscription_id=subscription_id,
                pause_subscription=True,
                reason=reason,
                customer_email=customer_email,
            )
        )

    async def _update_subscription(self, command: UpdateSubscriptionCommand) -> Result[None, DomainError]:
        try:
            await self._mediator.send(command)
        except DomainError as e:
            return Failure(e)
        return Success(None)

    async def cancel_subscription(self, subscription_id: UUID) -> Result[None, DomainError]:
        subscription = await self._subscription_repository.get_subscription_by_id(subscription_id)
        if subscription is None:
            return Failure(NotFoundError("notfound.subscription"))

        try:
            subscription.cancel()
        except DomainError as e:
            return Failure(e)

        await self._subscription_repository.update_subscription(subscription)
        logger.info("subscription_canceled", subscription_id=str(subscription_id))
        return Success(None)

    async def create_subscription_plan(
        self,
        tenant_id: UUID,
        item_ids: Sequence[UUID],
        recurrence_type: RecurrenceType,
        billing_day: Optional[int] = None,
        term_file: Optional[bytes] = None,
    ) -> Result[SubscriptionPlan, DomainError]:
        """
        Build a plan from catalog items; its amount is the sum of the item amounts.

        An optional terms document is stored under the tenant's bucket and
        its URL kept on the plan.
        """
        catalog_items: list[CatalogItemData] = []
        for item_id in item_ids:
            try:
                catalog_item = await self._mediator.send(
                    GetCatalogItemCommand(item_id=item_id, tenant_id=tenant_id)
                )
            except NotFoundError:
                return Failure(NotFoundError("notfound.catalog_item", details={"item_id": str(item_id)}))
            if catalog_item is None:
                return Failure(NotFoundError("notfound.catalog_item", details={"item_id": str(item_id)}))
            catalog_items.append(catalog_item)

        tenant_exists = await self._mediator.send(UserExistsCommand(user_id=tenant_id))
        if not tenant_exists:
            return Failure(NotFoundError("notfound.company"))

        amount = sum((Decimal(str(item.amount)) for item in catalog_items), Decimal("0"))

        try:
            plan = SubscriptionPlan.create(
                tenant_id=tenant_id,
                amount=amount,
                recurrence_type=recurrence_type,
                items=[Item(id=item.id, name=item.name) for item in catalog_items],
                billing_day=billing_day,
            )
        except DomainError as e:
            return Failure(e)

        if term_file is not None:
            if self._file_storage is None:
                raise RuntimeError("File storage is not configured")
            term_url = await self._file_storage.store_file(
                StoredFile(
                    bucket_name=f"tenant-{tenant_id}",
                    folder=TERMS_FOLDER,
                    name=f"term_{plan.id}.pdf",
                    file=term_file,
                )
            )
            plan.attach_term(term_url)

        await self._subscription_plan_repository.create_subscription_plan(plan)
        logger.info("subscription_plan_created", subscription_plan_id=str(plan.id), tenant_id=str(tenant_id))
        return Success(plan)

    async def get_subscription_plans(
        self, filter: SubscriptionPlansFilter
    ) -> Result[PaginatedResult[SubscriptionPlan], DomainError]:
        return Success(await self._subscription_plan_repository.get_subscription_plans(filter))

    async def get_subscriptions(
        self, filter: SubscriptionsFilter
    ) -> Result[PaginatedResult[Subscription], DomainError]:
        return Success(await self._subscription_repository.get_subscriptions(filter))
