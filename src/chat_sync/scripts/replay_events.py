"""Replay recorded push events onto the local user's channel.

Input is JSON Lines, one ``{"event": ..., "data": {...}}`` envelope per line:

    python -m chat_sync.scripts.replay_events events.jsonl
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import redis.asyncio as aioredis

from chat_sync.config import settings
from chat_sync.infrastructure.bus.redis_pubsub import RedisPubSubPublisher

logger = logging.getLogger(__name__)


async def replay(path: Path, delay: float = 0.0) -> int:
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    publisher = RedisPubSubPublisher(redis)
    sent = 0
    try:
        for lineno, line in enumerate(path.read_text().splitlines(), start=1):
            if not line.strip():
                continue
            try:
                envelope = json.loads(line)
                event_type, data = envelope["event"], envelope["data"]
            except (ValueError, KeyError):
                logger.warning("Skipping line %d: not an event envelope", lineno)
                continue
            await publisher.publish(settings.push_channel, event_type, data)
            sent += 1
            if delay:
                await asyncio.sleep(delay)
    finally:
        await redis.aclose()
    logger.info("Replayed %d event(s) to %s", sent, settings.push_channel)
    return sent


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) < 2:
        raise SystemExit("usage: replay_events <events.jsonl> [delay-seconds]")
    delay = float(sys.argv[2]) if len(sys.argv) > 2 else 0.0
    asyncio.run(replay(Path(sys.argv[1]), delay))


if __name__ == "__main__":
    main()
