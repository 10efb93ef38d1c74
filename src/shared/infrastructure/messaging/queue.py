"""
Queue Port
Asynchronous hand-off of messages to an external consumer with a retry budget
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Sequence


@dataclass(frozen=True)
class QueueOptions:
    """
    Attributes:
        queue_name: Topic the messages are written to
        attempts: Maximum deliveries per message, first one included
    """

    queue_name: str
    attempts: int = 3

    def __post_init__(self) -> None:
        if not self.queue_name:
            raise ValueError("queue_name must be non-empty")
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")


@dataclass(frozen=True)
class Message:
    """
    Attributes:
        id: Unique per message
        name: Routing discriminator read by the consumer
        payload: JSON-serializable body
    """

    id: str
    name: str
    payload: dict[str, Any] = field(default_factory=dict)


class Queue(Protocol):
    """Producer side of a message queue. One instance per job run."""

    async def add_message(self, message: Message) -> None:
        ...

    async def add_messages(self, messages: Sequence[Message]) -> None:
        """Enqueue the whole batch in one call."""
        ...

    async def close(self) -> None:
        """Release the underlying connection. Called once, after the last enqueue."""
        ...


QueueFactory = Callable[[QueueOptions], Queue]
