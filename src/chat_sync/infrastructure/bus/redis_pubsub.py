"""Redis Pub/Sub push channel: publish side + subscriber background task."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

import redis.asyncio as aioredis

from chat_sync.application.exceptions import MalformedEventError
from chat_sync.infrastructure.bus.serializer import deserialize_event, serialize_event

logger = logging.getLogger(__name__)


class RedisPubSubPublisher:
    """Pushes envelopes onto a user's channel (used by dev tooling)."""

    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def publish(self, channel: str, event_type: str, payload: dict[str, Any]) -> None:
        raw = serialize_event(event_type, payload)
        await self._redis.publish(channel, raw)


OnEventCallback = Callable[[str, Any], Coroutine[Any, Any, Any]]


class RedisPubSubSubscriber:
    """Background task that listens to the push channel and dispatches events.

    Events are dispatched one at a time, in channel order; an event that
    fails to decode or to apply is logged and skipped.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnEventCallback,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="push-channel-subscriber")
        logger.info("Push subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Push subscriber stopped")

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                await self.dispatch(message["data"])
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()

    async def dispatch(self, raw: str | bytes) -> None:
        try:
            event_type, data = deserialize_event(raw)
        except MalformedEventError as exc:
            logger.warning("Dropping push message: %s", exc.detail)
            return
        try:
            await self._callback(event_type, data)
        except Exception:
            logger.exception("Error processing %s push event", event_type)
