"""
Subscription Domain Events
Recorded by the aggregates on every accepted state change
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional
from uuid import UUID

from shared.domain.domain_event import DomainEvent


@dataclass(frozen=True, kw_only=True)
class SubscriptionCreated(DomainEvent):
    subscriber_id: UUID
    subscription_plan_id: UUID
    tenant_id: UUID


@dataclass(frozen=True, kw_only=True)
class SubscriptionActivated(DomainEvent):
    previous_status: str
    first_activation: bool


@dataclass(frozen=True, kw_only=True)
class SubscriptionPaused(DomainEvent):
    pass


@dataclass(frozen=True, kw_only=True)
class SubscriptionCanceled(DomainEvent):
    previous_status: str


@dataclass(frozen=True, kw_only=True)
class SubscriptionFinished(DomainEvent):
    pass


@dataclass(frozen=True, kw_only=True)
class SubscriptionPlanCreated(DomainEvent):
    tenant_id: UUID
    recurrence_type: str


@dataclass(frozen=True, kw_only=True)
class SubscriptionPlanBillingDateAdvanced(DomainEvent):
    previous_billing_date: Optional[date]
    next_billing_date: date
