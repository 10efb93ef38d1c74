"""
Shared Messaging Infrastructure
Queue port and its Redis adapter
"""
from shared.infrastructure.messaging.queue import Message, Queue, QueueFactory, QueueOptions
from shared.infrastructure.messaging.redis_queue import (
    QueueClosedError,
    RedisQueue,
    RedisQueueConsumer,
)

__all__ = [
    "Message",
    "Queue",
    "QueueFactory",
    "QueueOptions",
    "QueueClosedError",
    "RedisQueue",
    "RedisQueueConsumer",
]
