"""Buffer for mutations that arrive before the message they target."""
from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta

from chat_sync.domain.events import MutationEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Parked:
    event: MutationEvent
    parked_at: datetime


class PendingMutations:
    """Bounded, time-limited parking lot keyed by (conversation, message)."""

    def __init__(self, ttl_seconds: float, max_entries: int) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_entries = max_entries
        self._entries: OrderedDict[tuple[str, str], list[_Parked]] = OrderedDict()
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def park(self, conversation_id: str, message_id: str, event: MutationEvent, now: datetime) -> None:
        if self._max_entries <= 0:
            return
        while self._size >= self._max_entries:
            self._evict_oldest()
        self._entries.setdefault((conversation_id, message_id), []).append(_Parked(event, now))
        self._size += 1

    def drain(self, conversation_id: str, message_id: str, now: datetime) -> list[MutationEvent]:
        """Remove and return unexpired events for the message, oldest first."""
        parked = self._entries.pop((conversation_id, message_id), [])
        self._size -= len(parked)
        live = [p.event for p in parked if now - p.parked_at <= self._ttl]
        if len(live) < len(parked):
            logger.info(
                "Dropped %d expired mutation(s) for message %s",
                len(parked) - len(live), message_id,
            )
        return live

    def expire(self, now: datetime) -> int:
        dropped = 0
        for key in list(self._entries):
            kept = [p for p in self._entries[key] if now - p.parked_at <= self._ttl]
            dropped += len(self._entries[key]) - len(kept)
            if kept:
                self._entries[key] = kept
            else:
                del self._entries[key]
        self._size -= dropped
        if dropped:
            logger.info("Expired %d buffered mutation(s)", dropped)
        return dropped

    def clear(self) -> None:
        self._entries.clear()
        self._size = 0

    def _evict_oldest(self) -> None:
        key, parked = next(iter(self._entries.items()))
        dropped = parked.pop(0)
        self._size -= 1
        if not parked:
            del self._entries[key]
        logger.warning(
            "Pending mutation buffer full, evicted %s for message %s",
            type(dropped.event).__name__, key[1],
        )
