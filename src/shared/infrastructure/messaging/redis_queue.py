"""
Redis-backed Queue
One Redis list per queue name; claimed envelopes wait in ``<queue>:processing``,
failed ones land in ``<queue>:failed``
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Sequence

from redis.asyncio import Redis

from shared.domain.base_entity import utcnow
from shared.infrastructure.messaging.queue import Message, QueueOptions
from shared.infrastructure.observability.logger import get_logger
from shared.utils.serialization import dumps, loads

logger = get_logger(__name__)

MessageHandler = Callable[[Message], Awaitable[Any]]


def failed_key(queue_name: str) -> str:
    return f"{queue_name}:failed"


def processing_key(queue_name: str) -> str:
    return f"{queue_name}:processing"


class QueueClosedError(RuntimeError):
    """Raised when enqueueing on a queue that was already closed."""


class RedisQueue:
    """
    Producer writing JSON envelopes to the tail of a Redis list.

    Each envelope carries the retry budget (``attempts``) and the number of
    failed deliveries so far (``attempts_made``) so the consumer can decide
    between re-enqueue and dead-lettering.
    """

    def __init__(self, client: Redis, options: QueueOptions, *, owns_client: bool = False) -> None:
        self._client = client
        self._options = options
        self._owns_client = owns_client
        self._closed = False

    @classmethod
    def from_url(cls, url: str, options: QueueOptions) -> RedisQueue:
        """Queue with its own connection, released by ``close``."""
        client = Redis.from_url(url, decode_responses=True)
        return cls(client, options, owns_client=True)

    @property
    def name(self) -> str:
        return self._options.queue_name

    @property
    def closed(self) -> bool:
        return self._closed

    def _envelope(self, message: Message) -> str:
        return dumps(
            {
                "id": message.id,
                "name": message.name,
                "payload": message.payload,
                "attempts": self._options.attempts,
                "attempts_made": 0,
                "enqueued_at": utcnow().isoformat(),
            }
        )

    async def add_message(self, message: Message) -> None:
        await self.add_messages([message])

    async def add_messages(self, messages: Sequence[Message]) -> None:
        if self._closed:
            raise QueueClosedError(f"Queue {self.name} is closed")
        if not messages:
            return

        async with self._client.pipeline(transaction=True) as pipe:
            for message in messages:
                pipe.rpush(self.name, self._envelope(message))
            await pipe.execute()

        logger.debug("queue_messages_added", queue=self.name, count=len(messages))

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            await self._client.aclose()
        logger.debug("queue_closed", queue=self.name)


class RedisQueueConsumer:
    """
    Consumer claiming envelopes from the head of a queue list.

    An envelope is moved atomically into ``<queue>:processing`` before its
    handler runs and leaves that list only after it was handled, re-enqueued
    or dead-lettered. Envelopes stranded there by a cancelled or crashed
    consumer go back to the head of the queue on ``recover``, so delivery is
    at-least-once. A handler failure re-enqueues the envelope until its
    ``attempts`` budget is spent, then moves it to the failed list together
    with the last error.
    """

    def __init__(
        self,
        client: Redis,
        queue_name: str,
        handler: MessageHandler,
        *,
        poll_interval: float = 1.0,
    ) -> None:
        self._client = client
        self._queue_name = queue_name
        self._processing_key = processing_key(queue_name)
        self._handler = handler
        self._poll_interval = poll_interval
        self._running = False

    async def recover(self) -> int:
        """
        Return claimed but unacknowledged envelopes to the queue.

        Returns:
            Number of envelopes moved back
        """
        moved = 0
        while await self._client.lmove(self._processing_key, self._queue_name, "RIGHT", "LEFT") is not None:
            moved += 1
        if moved:
            logger.warning("queue_messages_recovered", queue=self._queue_name, count=moved)
        return moved

    async def _claim(self, timeout: Optional[float]) -> Optional[str]:
        if timeout is None:
            return await self._client.lmove(self._queue_name, self._processing_key, "LEFT", "RIGHT")
        return await self._client.blmove(self._queue_name, self._processing_key, timeout, "LEFT", "RIGHT")

    async def _settle(self, raw: str, target: Optional[str] = None, envelope: Optional[dict[str, Any]] = None) -> None:
        """Drop the claim and, when ``target`` is given, push the envelope there in the same transaction."""
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.lrem(self._processing_key, 1, raw)
            if target is not None:
                pipe.rpush(target, dumps(envelope) if envelope is not None else raw)
            await pipe.execute()

    async def process_next(self, timeout: Optional[float] = None) -> bool:
        """
        Handle a single envelope.

        Args:
            timeout: Seconds to block waiting for an envelope; None returns at once

        Returns:
            False when the queue was empty
        """
        raw = await self._claim(timeout)
        if raw is None:
            return False

        try:
            envelope = loads(raw)
            message = Message(id=envelope["id"], name=envelope["name"], payload=envelope.get("payload") or {})
        except (ValueError, KeyError, TypeError) as e:
            await self._settle(raw, failed_key(self._queue_name))
            logger.error("queue_message_malformed", queue=self._queue_name, error=str(e))
            return True

        try:
            await self._handler(message)
        except Exception as e:
            envelope["attempts_made"] = int(envelope.get("attempts_made", 0)) + 1
            if envelope["attempts_made"] < int(envelope.get("attempts", 1)):
                await self._settle(raw, self._queue_name, envelope)
                logger.warning(
                    "queue_message_retry",
                    queue=self._queue_name,
                    message_id=message.id,
                    attempts_made=envelope["attempts_made"],
                    error=str(e),
                )
            else:
                envelope["last_error"] = str(e)
                await self._settle(raw, failed_key(self._queue_name), envelope)
                logger.error(
                    "queue_message_failed",
                    queue=self._queue_name,
                    message_id=message.id,
                    attempts_made=envelope["attempts_made"],
                    error=str(e),
                )
            return True

        await self._settle(raw)
        logger.debug("queue_message_processed", queue=self._queue_name, message_id=message.id)
        return True

    async def run(self) -> None:
        """Recover stranded envelopes, then block on the queue until ``stop`` is called."""
        self._running = True
        await self.recover()
        logger.info("queue_consumer_started", queue=self._queue_name)
        while self._running:
            await self.process_next(timeout=self._poll_interval)
        logger.info("queue_consumer_stopped", queue=self._queue_name)

    def stop(self) -> None:
        self._running = False
