"""
Aggregate Root Base Class
Records domain events and acts as consistency boundary
"""
from __future__ import annotations

from typing import Any
from uuid import UUID

from shared.domain.base_entity import BaseEntity
from shared.domain.domain_event import DomainEvent


class BaseAggregateRoot(BaseEntity):
    """
    Base class for aggregate roots.

    Aggregate roots are the only entry point for mutating an aggregate.
    Every accepted state transition records a domain event; callers collect
    the events after the aggregate has been persisted.

    Attributes:
        _domain_events: List of uncollected domain events
    """

    def __init__(self, id: UUID | None = None, **kwargs: Any) -> None:
        super().__init__(id=id, **kwargs)
        self._domain_events: list[DomainEvent] = []

    def raise_event(self, event: DomainEvent) -> None:
        """Record a domain event, enriching it with aggregate context."""
        if event.aggregate_id is None:
            object.__setattr__(event, "aggregate_id", self.id)
        if not event.aggregate_type:
            object.__setattr__(event, "aggregate_type", self.__class__.__name__)
        self._domain_events.append(event)

    def collect_domain_events(self) -> list[DomainEvent]:
        """
        Collect and clear recorded domain events.

        Returns:
            Events recorded since the last collection, oldest first
        """
        events = self._domain_events.copy()
        self._domain_events.clear()
        return events

    @property
    def has_domain_events(self) -> bool:
        return len(self._domain_events) > 0
