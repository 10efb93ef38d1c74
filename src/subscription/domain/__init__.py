"""
Subscription Domain Layer
Aggregates, events and storage ports
"""
from subscription.domain.repositories import (
    ISubscriptionPlanRepository,
    ISubscriptionRepository,
    SubscriptionPlansFilter,
    SubscriptionsFilter,
)
from subscription.domain.subscription import Subscription, SubscriptionStatus
from subscription.domain.subscription_plan import Item, RecurrenceType, SubscriptionPlan

__all__ = [
    "Subscription",
    "SubscriptionStatus",
    "SubscriptionPlan",
    "RecurrenceType",
    "Item",
    "ISubscriptionRepository",
    "ISubscriptionPlanRepository",
    "SubscriptionsFilter",
    "SubscriptionPlansFilter",
]
