from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

import pytest
import structlog

from shared.infrastructure.observability.logger import bound_context, clear_context, configure_logging
from shared.utils.serialization import dumps, loads
from subscription.domain.subscription import SubscriptionStatus


def test_bound_context_is_scoped():
    clear_context()
    with bound_context(job="charge_active_subscriptions", run_id="abc"):
        assert structlog.contextvars.get_contextvars() == {
            "job": "charge_active_subscriptions",
            "run_id": "abc",
        }
    assert "run_id" not in structlog.contextvars.get_contextvars()


def test_unknown_log_level():
    with pytest.raises(ValueError):
        configure_logging("LOUD")


def test_envelope_values_are_json_safe():
    raw = dumps(
        {
            "id": UUID("12345678-1234-5678-1234-567812345678"),
            "amount": Decimal("49.90"),
            "due": date(2024, 3, 15),
            "at": datetime(2024, 3, 15, 3, 0, tzinfo=timezone.utc),
            "status": SubscriptionStatus.ACTIVE,
        }
    )
    assert loads(raw) == {
        "id": "12345678-1234-5678-1234-567812345678",
        "amount": "49.90",
        "due": "2024-03-15",
        "at": "2024-03-15T03:00:00+00:00",
        "status": "active",
    }
