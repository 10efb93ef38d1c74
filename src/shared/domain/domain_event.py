"""
Domain Event Base Class
Immutable record of an accepted state change
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from shared.domain.base_entity import utcnow


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """
    Base class for the events aggregates record.

    Concrete events declare their own fields on top of the envelope below.
    ``aggregate_id`` and ``aggregate_type`` are left empty by the caller and
    filled in by ``BaseAggregateRoot.raise_event``.
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utcnow)
    aggregate_id: UUID | None = None
    aggregate_type: str = ""
    event_version: int = 1

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def payload(self) -> dict[str, Any]:
        """Fields declared by the concrete event, envelope excluded."""
        envelope = {f.name for f in fields(DomainEvent)}
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name not in envelope}

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": str(self.aggregate_id) if self.aggregate_id else None,
            "aggregate_type": self.aggregate_type,
            "event_version": self.event_version,
            "payload": self.payload(),
        }
