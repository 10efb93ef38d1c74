from datetime import datetime, timezone
from uuid import uuid4

import pytest

from conftest import make_subscription
from shared.exceptions import DomainError
from subscription.domain.events import (
    SubscriptionActivated,
    SubscriptionCanceled,
    SubscriptionCreated,
    SubscriptionFinished,
    SubscriptionPaused,
)
from subscription.domain.subscription import Subscription, SubscriptionStatus

S = SubscriptionStatus


def test_create_pending_has_no_started_at():
    sub = Subscription.create_pending(uuid4(), uuid4(), uuid4())
    assert sub.status == S.PENDING
    assert sub.started_at is None
    events = sub.collect_domain_events()
    assert [type(e) for e in events] == [SubscriptionCreated]
    assert events[0].aggregate_id == sub.id


def test_first_activation_sets_started_at():
    sub = Subscription.create_pending(uuid4(), uuid4(), uuid4())
    sub.collect_domain_events()

    sub.activate()

    assert sub.status == S.ACTIVE
    assert sub.started_at is not None
    (event,) = sub.collect_domain_events()
    assert isinstance(event, SubscriptionActivated)
    assert event.first_activation is True
    assert event.previous_status == "pending"


def test_resume_keeps_started_at():
    started_at = datetime(2023, 6, 1, tzinfo=timezone.utc)
    sub = make_subscription(S.PAUSED, started_at=started_at)

    sub.activate()

    assert sub.status == S.ACTIVE
    assert sub.started_at == started_at
    (event,) = sub.collect_domain_events()
    assert event.first_activation is False


def test_pause_active_subscription():
    sub = make_subscription(S.ACTIVE)
    before = sub.updated_at
    sub.pause()
    assert sub.is_paused()
    assert sub.updated_at >= before
    assert isinstance(sub.collect_domain_events()[0], SubscriptionPaused)


@pytest.mark.parametrize(
    "status,key",
    [
        (S.ACTIVE, "subscription_actived"),
        (S.CANCELED, "subscription_canceled"),
        (S.FINISHED, "subscription_finished"),
    ],
)
def test_activate_forbidden(status, key):
    sub = make_subscription(status)
    started_at = sub.started_at
    with pytest.raises(DomainError) as exc:
        sub.activate()
    assert exc.value.message == key
    assert sub.status == status
    assert sub.started_at == started_at
    assert not sub.has_domain_events


@pytest.mark.parametrize(
    "status,key",
    [
        (S.PENDING, "subscription_pending"),
        (S.PAUSED, "subscription_paused"),
        (S.CANCELED, "subscription_canceled"),
        (S.FINISHED, "subscription_finished"),
    ],
)
def test_pause_forbidden(status, key):
    sub = make_subscription(status)
    with pytest.raises(DomainError) as exc:
        sub.pause()
    assert exc.value.message == key
    assert sub.status == status


@pytest.mark.parametrize("status", [S.PENDING, S.ACTIVE, S.PAUSED])
def test_cancel_from_non_terminal(status):
    sub = make_subscription(status)
    sub.cancel()
    assert sub.status == S.CANCELED
    (event,) = sub.collect_domain_events()
    assert isinstance(event, SubscriptionCanceled)
    assert event.previous_status == status.value


@pytest.mark.parametrize(
    "status,key",
    [(S.CANCELED, "subscription_canceled"), (S.FINISHED, "subscription_finished")],
)
def test_cancel_forbidden(status, key):
    sub = make_subscription(status)
    with pytest.raises(DomainError) as exc:
        sub.cancel()
    assert exc.value.message == key


def test_finish_active():
    sub = make_subscription(S.ACTIVE)
    sub.finish()
    assert sub.status == S.FINISHED
    assert isinstance(sub.collect_domain_events()[0], SubscriptionFinished)


@pytest.mark.parametrize(
    "status,key",
    [
        (S.PENDING, "subscription_pending"),
        (S.PAUSED, "subscription_paused"),
        (S.CANCELED, "subscription_canceled"),
        (S.FINISHED, "subscription_finished"),
    ],
)
def test_finish_forbidden(status, key):
    sub = make_subscription(status)
    with pytest.raises(DomainError) as exc:
        sub.finish()
    assert exc.value.message == key


def test_started_at_must_match_status():
    with pytest.raises(DomainError):
        Subscription(uuid4(), uuid4(), uuid4(), status=S.ACTIVE, started_at=None)
    with pytest.raises(DomainError):
        Subscription(uuid4(), uuid4(), uuid4(), status=S.PENDING, started_at=datetime.now(timezone.utc))


def test_event_serializes_its_payload():
    sub = Subscription.create_pending(uuid4(), uuid4(), uuid4())
    sub.collect_domain_events()
    sub.cancel()

    (event,) = sub.collect_domain_events()
    data = event.to_dict()

    assert data["event_type"] == "SubscriptionCanceled"
    assert data["aggregate_type"] == "Subscription"
    assert data["aggregate_id"] == str(sub.id)
    assert data["payload"] == {"previous_status": "pending"}
