"""
Base Command Contract
All commands dispatched through the Mediator inherit from this
"""
from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4


@dataclass(frozen=True)
class BaseCommand:
    """
    Base class for all commands in the system.

    Commands are immutable requests addressed to exactly one handler. A
    command crossing a module boundary only carries identifiers and plain
    values, never entities of the sending module.

    Example:
        @dataclass(frozen=True)
        class GetSubscriberCommand(BaseCommand):
            subscriber_id: UUID
    """

    command_id: UUID = field(default_factory=uuid4, kw_only=True)
    issued_by: UUID | None = field(default=None, kw_only=True)
