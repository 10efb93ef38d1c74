"""
Base Entity Contract for Domain Layer
Provides UUID-based identity, equality, and lifecycle timestamps
"""
from __future__ import annotations

from abc import ABC
from datetime import datetime, timezone
from uuid import UUID, uuid4


def utcnow() -> datetime:
    """Timezone-aware current UTC timestamp."""
    return datetime.now(timezone.utc)


class BaseEntity(ABC):
    """
    Abstract base class for all domain entities.

    Entities are defined by their identity (id), not their attributes.
    Two entities are equal if they have the same id, regardless of other attributes.

    Attributes:
        id: Unique identifier (UUID, generated at creation)
        created_at: Timestamp of creation
        updated_at: Timestamp of last state change
    """

    def __init__(
        self,
        id: UUID | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> None:
        now = utcnow()
        self.id: UUID = id or uuid4()
        self.created_at: datetime = created_at or now
        self.updated_at: datetime = updated_at or now

    def __eq__(self, other: object) -> bool:
        """Entities are equal if they have the same id and type."""
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id})"

    def touch(self) -> None:
        """Move updated_at to the current time after a state change."""
        self.updated_at = utcnow()
