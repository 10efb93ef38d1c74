"""
Subscription Aggregate
Recurring billing agreement between a subscriber and a tenant's plan
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from shared.domain.base_aggregate_root import BaseAggregateRoot
from shared.domain.base_entity import utcnow
from shared.exceptions import DomainError
from subscription.domain.events import (
    SubscriptionActivated,
    SubscriptionCanceled,
    SubscriptionCreated,
    SubscriptionFinished,
    SubscriptionPaused,
)


class SubscriptionStatus(str, Enum):
    """Lifecycle states; CANCELED and FINISHED are terminal"""
    PENDING = "pending"
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELED = "canceled"
    FINISHED = "finished"


# status -> error key raised when the operation is attempted from that status
_ACTIVATE_FORBIDDEN = {
    SubscriptionStatus.ACTIVE: "subscription_actived",
    SubscriptionStatus.CANCELED: "subscription_canceled",
    SubscriptionStatus.FINISHED: "subscription_finished",
}
_PAUSE_FORBIDDEN = {
    SubscriptionStatus.PENDING: "subscription_pending",
    SubscriptionStatus.PAUSED: "subscription_paused",
    SubscriptionStatus.CANCELED: "subscription_canceled",
    SubscriptionStatus.FINISHED: "subscription_finished",
}
_CANCEL_FORBIDDEN = {
    SubscriptionStatus.CANCELED: "subscription_canceled",
    SubscriptionStatus.FINISHED: "subscription_finished",
}
_FINISH_FORBIDDEN = {
    SubscriptionStatus.PENDING: "subscription_pending",
    SubscriptionStatus.PAUSED: "subscription_paused",
    SubscriptionStatus.CANCELED: "subscription_canceled",
    SubscriptionStatus.FINISHED: "subscription_finished",
}

_STARTED_STATUSES = (
    SubscriptionStatus.ACTIVE,
    SubscriptionStatus.PAUSED,
    SubscriptionStatus.FINISHED,
)


class Subscription(BaseAggregateRoot):
    """
    Subscription aggregate root.

    Created PENDING, then moved through activate/pause/cancel/finish. A
    forbidden transition raises a DomainError whose message is a stable key
    and leaves the aggregate untouched.

    Attributes:
        subscriber_id: Customer being billed
        subscription_plan_id: Plan that owns amount and billing date
        tenant_id: Company that owns the subscription
        status: Current lifecycle state
        started_at: First activation time; None until then
    """

    def __init__(
        self,
        subscriber_id: UUID,
        subscription_plan_id: UUID,
        tenant_id: UUID,
        status: SubscriptionStatus = SubscriptionStatus.PENDING,
        started_at: Optional[datetime] = None,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at=created_at, updated_at=updated_at)
        status = SubscriptionStatus(status)
        if status == SubscriptionStatus.PENDING and started_at is not None:
            raise DomainError("subscription.started_at")
        if status in _STARTED_STATUSES and started_at is None:
            raise DomainError("subscription.started_at")

        self._subscriber_id = subscriber_id
        self._subscription_plan_id = subscription_plan_id
        self._tenant_id = tenant_id
        self._status = status
        self._started_at = started_at

    @staticmethod
    def create_pending(
        subscriber_id: UUID,
        subscription_plan_id: UUID,
        tenant_id: UUID,
    ) -> Subscription:
        """Factory for a new subscription awaiting its first activation."""
        subscription = Subscription(
            subscriber_id=subscriber_id,
            subscription_plan_id=subscription_plan_id,
            tenant_id=tenant_id,
            status=SubscriptionStatus.PENDING,
        )
        subscription.raise_event(
            SubscriptionCreated(
                subscriber_id=subscriber_id,
                subscription_plan_id=subscription_plan_id,
                tenant_id=tenant_id,
            )
        )
        return subscription

    def _guard(self, forbidden: dict[SubscriptionStatus, str]) -> None:
        key = forbidden.get(self._status)
        if key is not None:
            raise DomainError(key, details={"status": self._status.value})

    def activate(self) -> None:
        """PENDING or PAUSED -> ACTIVE; started_at is only set the first time."""
        self._guard(_ACTIVATE_FORBIDDEN)

        previous = self._status
        first_activation = self._started_at is None
        self._status = SubscriptionStatus.ACTIVE
        if first_activation:
            self._started_at = utcnow()
        self.touch()

        self.raise_event(
            SubscriptionActivated(previous_status=previous.value, first_activation=first_activation)
        )

    def pause(self) -> None:
        """ACTIVE -> PAUSED"""
        self._guard(_PAUSE_FORBIDDEN)

        self._status = SubscriptionStatus.PAUSED
        self.touch()
        self.raise_event(SubscriptionPaused())

    def cancel(self) -> None:
        """Any non-terminal state -> CANCELED"""
        self._guard(_CANCEL_FORBIDDEN)

        previous = self._status
        self._status = SubscriptionStatus.CANCELED
        self.touch()
        self.raise_event(SubscriptionCanceled(previous_status=previous.value))

    def finish(self) -> None:
        """ACTIVE -> FINISHED"""
        self._guard(_FINISH_FORBIDDEN)

        self._status = SubscriptionStatus.FINISHED
        self.touch()
        self.raise_event(SubscriptionFinished())

    def is_active(self) -> bool:
        return self._status == SubscriptionStatus.ACTIVE

    def is_paused(self) -> bool:
        return self._status == SubscriptionStatus.PAUSED

    # Properties
    @property
    def subscriber_id(self) -> UUID:
        return self._subscriber_id

    @property
    def subscription_plan_id(self) -> UUID:
        return self._subscription_plan_id

    @property
    def tenant_id(self) -> UUID:
        return self._tenant_id

    @property
    def status(self) -> SubscriptionStatus:
        return self._status

    @property
    def started_at(self) -> Optional[datetime]:
        return self._started_at
