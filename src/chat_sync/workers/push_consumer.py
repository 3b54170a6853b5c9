"""Consumer for the per-user push channel via Redis Pub/Sub."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import redis.asyncio as aioredis

from chat_sync.application.context import ReconciliationContext
from chat_sync.application.exceptions import MalformedEventError
from chat_sync.config import settings
from chat_sync.domain.value_objects.enums import EventKind
from chat_sync.infrastructure.bus.redis_pubsub import OnEventCallback, RedisPubSubSubscriber
from chat_sync.infrastructure.push.mappers import payload_to_event
from chat_sync.infrastructure.push.protocol import parse_event
from chat_sync.services import reconcile_service

logger = logging.getLogger(__name__)

_KNOWN_EVENTS = frozenset(kind.value for kind in EventKind)


def handle_push_event(event_type: str, data: Any, ctx: ReconciliationContext) -> bool:
    """Validate, map and reconcile one push event. Returns True if state changed."""
    if event_type not in _KNOWN_EVENTS:
        logger.debug("Ignoring unknown event: %s", event_type)
        return False

    try:
        payload = parse_event(event_type, data)
    except MalformedEventError as exc:
        logger.warning("Dropping malformed %s event: %s", event_type, exc.detail)
        return False

    event = payload_to_event(payload, ctx.local_user_id)
    return reconcile_service.handle_event(event, ctx)


def make_dispatcher(ctx: ReconciliationContext) -> OnEventCallback:
    async def _dispatch(event_type: str, data: Any) -> None:
        handle_push_event(event_type, data, ctx)

    return _dispatch


async def run_consumer() -> None:
    if not settings.LOCAL_USER_ID:
        raise SystemExit("LOCAL_USER_ID must be set")

    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    ctx = ReconciliationContext.from_settings(settings)

    subscriber = RedisPubSubSubscriber(redis, settings.push_channel, make_dispatcher(ctx))
    await subscriber.start()
    logger.info("Push consumer started for user %s", ctx.local_user_id)

    try:
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        pass
    finally:
        await subscriber.stop()
        ctx.close()
        await redis.aclose()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(run_consumer())


if __name__ == "__main__":
    main()
