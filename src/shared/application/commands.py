"""
Commands exchanged between modules through the Mediator.

The set is closed: every cross-module request the billing context issues or
answers is declared here.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from shared.application.base_command import BaseCommand


@dataclass(frozen=True)
class GetSubscriberCommand(BaseCommand):
    """Answered by the subscriber module with the subscriber, or None."""

    subscriber_id: UUID


@dataclass(frozen=True)
class UserExistsCommand(BaseCommand):
    """Answered by the company module with True when the tenant exists."""

    user_id: UUID


@dataclass(frozen=True)
class GetCatalogItemCommand(BaseCommand):
    """Answered by the catalog module with the item (exposing ``amount``), or None."""

    item_id: UUID
    tenant_id: UUID


@dataclass(frozen=True)
class UpdateSubscriptionCommand(BaseCommand):
    """Pause (``pause_subscription=True``) or activate/resume a subscription."""

    subscription_id: UUID
    pause_subscription: bool = False
    customer_email: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class CatalogItemData:
    """Answer to ``GetCatalogItemCommand``."""

    id: UUID
    name: str
    amount: Decimal
