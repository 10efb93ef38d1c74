"""
Repository Protocols (Interfaces)
Storage ports consumed by the service, the command handler and the charge job
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence
from uuid import UUID

from shared.utils.pagination import PageOptions, PaginatedResult
from subscription.domain.subscription import Subscription, SubscriptionStatus
from subscription.domain.subscription_plan import SubscriptionPlan


@dataclass(frozen=True)
class SubscriptionsFilter:
    status: Optional[SubscriptionStatus] = None
    tenant_id: Optional[UUID] = None
    page_options: Optional[PageOptions] = None


@dataclass(frozen=True)
class SubscriptionPlansFilter:
    tenant_id: Optional[UUID] = None
    page_options: Optional[PageOptions] = None


class ISubscriptionRepository(Protocol):
    """Subscription repository interface"""

    async def get_subscriptions(self, filter: SubscriptionsFilter) -> PaginatedResult[Subscription]:
        """
        One page of subscriptions matching the filter.

        ``page_result`` is None when ``filter.page_options`` is None; its
        ``next_page`` is -1 on the last page.
        """
        ...

    async def get_subscription_by_id(self, subscription_id: UUID) -> Optional[Subscription]:
        """Get subscription by ID"""
        ...

    async def create_subscription(self, subscription: Subscription) -> None:
        """Insert a new subscription"""
        ...

    async def update_subscription(self, subscription: Subscription) -> None:
        """Write status, started_at and updated_at of an existing subscription"""
        ...


class ISubscriptionPlanRepository(Protocol):
    """Subscription plan repository interface"""

    async def get_subscription_plans(self, filter: SubscriptionPlansFilter) -> PaginatedResult[SubscriptionPlan]:
        """One page of plans matching the filter"""
        ...

    async def get_subscription_plans_by_ids(self, ids: Sequence[UUID]) -> list[SubscriptionPlan]:
        """Batch lookup in a single call; unknown ids are ignored"""
        ...

    async def get_subscription_plan_by_id(self, plan_id: UUID) -> Optional[SubscriptionPlan]:
        """Get plan by ID"""
        ...

    async def create_subscription_plan(self, plan: SubscriptionPlan) -> None:
        """Insert a new plan with its items"""
        ...

    async def update_subscription_plan(self, plan: SubscriptionPlan) -> None:
        """Write the mutable plan fields (billing date, term url)"""
        ...
