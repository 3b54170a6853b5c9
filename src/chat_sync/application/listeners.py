"""Change notification for UI collaborators."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from chat_sync.domain.entities.summary import LastMessageSummary
from chat_sync.domain.value_objects.enums import ChangeReason

logger = logging.getLogger(__name__)

ALL_CONVERSATIONS = "*"


@dataclass(frozen=True, slots=True)
class ConversationChanged:
    conversation_id: str
    reason: ChangeReason
    message_id: str | None = None
    summaries: dict[str, LastMessageSummary | None] = field(default_factory=dict)


Listener = Callable[[ConversationChanged], None]


@dataclass(frozen=True, slots=True, eq=False)
class Subscription:
    """Handle for one registration. Compared by identity, so two owners of the
    same callable hold independent subscriptions."""

    conversation_id: str
    listener: Listener


class ListenerRegistry:
    """Tracks listeners per conversation; ``ALL_CONVERSATIONS`` hears everything.

    Every ``subscribe`` call registers a separate subscription, even for a
    callable that is already registered; it is called once per subscription.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[Subscription]] = {}

    def subscribe(self, conversation_id: str, listener: Listener) -> Subscription:
        subscription = Subscription(conversation_id, listener)
        subs = self._subscriptions.setdefault(conversation_id, [])
        subs.append(subscription)
        logger.debug("Listener subscribed to %s (total=%d)", conversation_id, len(subs))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subs = self._subscriptions.get(subscription.conversation_id)
        if not subs:
            return
        if subscription in subs:
            subs.remove(subscription)
        if not subs:
            del self._subscriptions[subscription.conversation_id]

    def unsubscribe_all(self, conversation_id: str) -> int:
        removed = self._subscriptions.pop(conversation_id, [])
        if removed:
            logger.debug("Removed %d listener(s) from %s", len(removed), conversation_id)
        return len(removed)

    def count(self, conversation_id: str) -> int:
        return len(self._subscriptions.get(conversation_id, ()))

    def clear(self) -> None:
        self._subscriptions.clear()

    def notify(self, change: ConversationChanged) -> None:
        """Deliver to the conversation's listeners, then to wildcard listeners."""
        dead: list[Subscription] = []
        for key in (change.conversation_id, ALL_CONVERSATIONS):
            for sub in list(self._subscriptions.get(key, ())):
                try:
                    sub.listener(change)
                except Exception:
                    logger.exception("Listener failed on %s, removing it", key)
                    dead.append(sub)
        for sub in dead:
            self.unsubscribe(sub)
