"""
Calendar-date clocks.

Billing dates are plain dates in the scheduler's timezone, so "today" has to be
read in that zone rather than in UTC.
"""
from __future__ import annotations

from datetime import date
from typing import Callable
from zoneinfo import ZoneInfo

from shared.domain.base_entity import utcnow

Clock = Callable[[], date]


def utc_today() -> date:
    return utcnow().date()


def zoned_today(timezone: str) -> Clock:
    """Clock returning the current date in ``timezone`` (an IANA name)."""
    zone = ZoneInfo(timezone)

    def today() -> date:
        return utcnow().astimezone(zone).date()

    return today
