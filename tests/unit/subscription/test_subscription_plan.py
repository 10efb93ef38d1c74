from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from conftest import make_plan
from shared.exceptions import DomainError
from subscription.domain.events import SubscriptionPlanBillingDateAdvanced, SubscriptionPlanCreated
from subscription.domain.subscription_plan import (
    Item,
    RecurrenceType,
    SubscriptionPlan,
    add_months,
)


def test_monthly_advance_same_day_next_month():
    plan = make_plan(next_billing_date=date(2024, 3, 15))
    assert plan.update_next_billing_date() == date(2024, 4, 15)
    assert plan.next_billing_date == date(2024, 4, 15)


def test_annual_advance_same_day_next_year():
    plan = make_plan(next_billing_date=date(2024, 3, 15), recurrence_type=RecurrenceType.ANNUALLY)
    assert plan.update_next_billing_date() == date(2025, 3, 15)


def test_december_rolls_into_next_year():
    plan = make_plan(next_billing_date=date(2024, 12, 10))
    assert plan.update_next_billing_date() == date(2025, 1, 10)


def test_month_end_is_clamped():
    plan = make_plan(next_billing_date=date(2024, 1, 31))
    assert plan.update_next_billing_date() == date(2024, 2, 29)


def test_leap_day_annual_is_clamped():
    plan = make_plan(next_billing_date=date(2024, 2, 29), recurrence_type=RecurrenceType.ANNUALLY)
    assert plan.update_next_billing_date() == date(2025, 2, 28)


def test_billing_day_anchor_restores_day_after_short_month():
    plan = make_plan(next_billing_date=date(2024, 2, 29), billing_day=31)
    assert plan.update_next_billing_date() == date(2024, 3, 31)


def test_unset_date_starts_from_today():
    plan = make_plan(next_billing_date=None)
    assert plan.update_next_billing_date(today=date(2024, 3, 15)) == date(2024, 4, 15)


def test_advance_is_strictly_later():
    for start in (date(2024, 1, 31), date(2024, 2, 29), date(2023, 12, 31), date(2024, 6, 1)):
        for recurrence in RecurrenceType:
            plan = make_plan(next_billing_date=start, recurrence_type=recurrence)
            assert plan.update_next_billing_date() > start


def test_advance_records_event():
    plan = make_plan(next_billing_date=date(2024, 3, 15))
    plan.update_next_billing_date()
    (event,) = plan.collect_domain_events()
    assert isinstance(event, SubscriptionPlanBillingDateAdvanced)
    assert event.previous_billing_date == date(2024, 3, 15)
    assert event.next_billing_date == date(2024, 4, 15)


def test_is_due_on_compares_date_only():
    plan = make_plan(next_billing_date=date(2024, 3, 15))
    assert plan.is_due_on(date(2024, 3, 15))
    assert not plan.is_due_on(date(2024, 3, 16))
    assert not make_plan(next_billing_date=None).is_due_on(date(2024, 3, 15))


@pytest.mark.parametrize("amount", [0, -1, "abc", "NaN"])
def test_amount_must_be_positive(amount):
    with pytest.raises(DomainError) as exc:
        make_plan(amount=amount)
    assert exc.value.message == "subscription_plan.amount"


@pytest.mark.parametrize("billing_day", [0, 32])
def test_billing_day_range(billing_day):
    with pytest.raises(DomainError) as exc:
        make_plan(billing_day=billing_day)
    assert exc.value.message == "subscription_plan.billing_day"


def test_create_factory():
    items = [Item(id=uuid4(), name="A"), Item(id=uuid4(), name="B")]
    plan = SubscriptionPlan.create(
        tenant_id=uuid4(),
        amount=Decimal("10.50"),
        recurrence_type=RecurrenceType.MONTHLY,
        items=items,
    )
    assert plan.items == items
    assert plan.next_billing_date is None
    assert plan.amount == Decimal("10.50")
    assert isinstance(plan.collect_domain_events()[0], SubscriptionPlanCreated)


def test_add_months_helper():
    assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
    assert add_months(date(2024, 1, 5), 1, anchor_day=20) == date(2024, 2, 20)


def test_month_end_anchor_survives_short_month():
    plan = make_plan(next_billing_date=date(2024, 1, 31))
    dates = [plan.update_next_billing_date() for _ in range(3)]
    assert dates == [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]
    assert plan.billing_day == 31


def test_first_advance_from_today_pins_anchor():
    plan = make_plan(next_billing_date=None)
    plan.update_next_billing_date(today=date(2024, 1, 30))
    assert plan.billing_day == 30
    assert plan.next_billing_date == date(2024, 2, 29)
    assert plan.update_next_billing_date() == date(2024, 3, 30)


def test_explicit_billing_day_is_kept():
    plan = make_plan(next_billing_date=date(2024, 3, 10), billing_day=10)
    plan.update_next_billing_date()
    assert plan.billing_day == 10


@pytest.mark.parametrize(
    "next_billing_date,billing_day",
    [(date(2024, 3, 15), 10), (date(2024, 2, 28), 31), (date(2024, 4, 29), 31)],
)
def test_billing_date_off_anchor_rejected(next_billing_date, billing_day):
    with pytest.raises(DomainError) as exc:
        make_plan(next_billing_date=next_billing_date, billing_day=billing_day)
    assert exc.value.message == "subscription_plan.billing_day"


def test_clamped_month_end_matches_anchor():
    assert make_plan(next_billing_date=date(2024, 4, 30), billing_day=31).billing_day == 31


def test_each_advance_is_one_period_on_the_anchor():
    plan = make_plan(next_billing_date=date(2024, 5, 31), billing_day=31)
    previous = plan.next_billing_date
    for _ in range(12):
        current = plan.update_next_billing_date()
        assert (current.year * 12 + current.month) - (previous.year * 12 + previous.month) == 1
        previous = current
