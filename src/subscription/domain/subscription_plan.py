"""
SubscriptionPlan Aggregate
Owns the recurring amount, the item list and the next billing date
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Iterable, Optional
from uuid import UUID, uuid4

from shared.domain.base_aggregate_root import BaseAggregateRoot
from shared.domain.base_entity import utcnow
from shared.exceptions import DomainError
from subscription.domain.events import (
    SubscriptionPlanBillingDateAdvanced,
    SubscriptionPlanCreated,
)


class RecurrenceType(str, Enum):
    """Billing cadence"""
    MONTHLY = "monthly"
    ANNUALLY = "annually"

    @property
    def months(self) -> int:
        return 12 if self is RecurrenceType.ANNUALLY else 1


@dataclass(frozen=True)
class Item:
    """Catalog item included in a plan."""

    id: UUID
    name: str


def add_months(base_date: date, months: int, anchor_day: Optional[int] = None) -> date:
    """
    Move ``base_date`` forward by ``months`` calendar months.

    The resulting day is ``anchor_day`` (or the base day) clamped to the last
    day of the target month, so Jan 31 + 1 month is Feb 28/29.
    """
    month_index = base_date.month - 1 + months
    year = base_date.year + (month_index // 12)
    month = month_index % 12 + 1
    return date(year, month, _clamp_day(year, month, anchor_day or base_date.day))


def _clamp_day(year: int, month: int, day: int) -> int:
    return min(day, calendar.monthrange(year, month)[1])


def _validate_amount(amount: Decimal | int | str) -> Decimal:
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise DomainError("subscription_plan.amount") from None
    if not value.is_finite() or value <= 0:
        raise DomainError("subscription_plan.amount")
    return value


class SubscriptionPlan(BaseAggregateRoot):
    """
    SubscriptionPlan aggregate root.

    ``next_billing_date`` only moves forward, one recurrence period per call
    to :meth:`update_next_billing_date`. The activation handler is the single
    caller; the charge scan only reads the date.

    Attributes:
        tenant_id: Company selling the plan
        amount: Positive amount charged every cycle
        recurrence_type: Billing cadence
        items: Catalog items covered by the plan
        term_url: Location of the signed terms document, if any
        billing_day: Optional day-of-month anchor (1..31)
        next_billing_date: Date of the next charge; None before first activation
    """

    def __init__(
        self,
        tenant_id: UUID,
        amount: Decimal | int | str,
        recurrence_type: RecurrenceType,
        items: Iterable[Item] = (),
        term_url: Optional[str] = None,
        billing_day: Optional[int] = None,
        next_billing_date: Optional[date] = None,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at=created_at, updated_at=updated_at)
        if billing_day is not None and not 1 <= billing_day <= 31:
            raise DomainError("subscription_plan.billing_day", details={"billing_day": billing_day})

        self._tenant_id = tenant_id
        self._amount = _validate_amount(amount)
        self._recurrence_type = RecurrenceType(recurrence_type)
        self._items = list(items)
        self._term_url = term_url
        self._billing_day = billing_day
        if isinstance(next_billing_date, datetime):
            next_billing_date = next_billing_date.date()
        if (
            billing_day is not None
            and next_billing_date is not None
            and next_billing_date.day != _clamp_day(next_billing_date.year, next_billing_date.month, billing_day)
        ):
            # next_billing_date sits on billing_day, clamped to the month end
            raise DomainError(
                "subscription_plan.billing_day",
                details={"billing_day": billing_day, "next_billing_date": next_billing_date.isoformat()},
            )
        self._next_billing_date = next_billing_date

    @staticmethod
    def create(
        tenant_id: UUID,
        amount: Decimal | int | str,
        recurrence_type: RecurrenceType,
        items: Iterable[Item],
        billing_day: Optional[int] = None,
        term_url: Optional[str] = None,
        id: Optional[UUID] = None,
    ) -> SubscriptionPlan:
        """Factory for a new plan; the billing date is set on first activation."""
        plan = SubscriptionPlan(
            id=id or uuid4(),
            tenant_id=tenant_id,
            amount=amount,
            recurrence_type=recurrence_type,
            items=items,
            term_url=term_url,
            billing_day=billing_day,
        )
        plan.raise_event(
            SubscriptionPlanCreated(tenant_id=tenant_id, recurrence_type=plan.recurrence_type.value)
        )
        return plan

    def update_next_billing_date(self, today: Optional[date] = None) -> date:
        """
        Advance ``next_billing_date`` by one recurrence period.

        Starts from the current billing date, or from ``today`` when none is
        set yet. Must be called at most once per activation. Without an
        explicit ``billing_day`` the day of the first base date becomes the
        anchor, so a month-end date clamped into a short month recovers in the
        following one.

        Returns:
            The new billing date
        """
        previous = self._next_billing_date
        base = previous or today or utcnow().date()
        if self._billing_day is None:
            self._billing_day = base.day
        self._next_billing_date = add_months(base, self._recurrence_type.months, self._billing_day)
        self.touch()

        self.raise_event(
            SubscriptionPlanBillingDateAdvanced(
                previous_billing_date=previous,
                next_billing_date=self._next_billing_date,
            )
        )
        return self._next_billing_date

    def is_due_on(self, day: date) -> bool:
        """True when the next charge falls on ``day`` (date part only)."""
        return self._next_billing_date is not None and self._next_billing_date == day

    def attach_term(self, term_url: str) -> None:
        self._term_url = term_url
        self.touch()

    # Properties
    @property
    def tenant_id(self) -> UUID:
        return self._tenant_id

    @property
    def amount(self) -> Decimal:
        return self._amount

    @property
    def recurrence_type(self) -> RecurrenceType:
        return self._recurrence_type

    @property
    def items(self) -> list[Item]:
        return list(self._items)

    @property
    def term_url(self) -> Optional[str]:
        return self._term_url

    @property
    def billing_day(self) -> Optional[int]:
        return self._billing_day

    @property
    def next_billing_date(self) -> Optional[date]:
        return self._next_billing_date
