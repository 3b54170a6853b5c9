"""Session-owned reconciliation state."""
from __future__ import annotations

import logging

from chat_sync.application.listeners import Listener, ListenerRegistry, Subscription
from chat_sync.application.pending import PendingMutations
from chat_sync.application.ports.clock import Clock, SystemClock
from chat_sync.application.store import ConversationMessageStore, VisibleSequence
from chat_sync.application.summaries import SummaryProjection
from chat_sync.config import Settings
from chat_sync.domain.entities.summary import LastMessageSummary

logger = logging.getLogger(__name__)


class ReconciliationContext:
    """Everything one client session knows about its conversations.

    Passed explicitly to every reconcile/history/action function; created at
    login and torn down with :meth:`close` at logout.
    """

    def __init__(
        self,
        local_user_id: str,
        *,
        clock: Clock | None = None,
        pending_ttl_seconds: float = 30.0,
        pending_max_entries: int = 1000,
    ) -> None:
        self.local_user_id = local_user_id
        self.clock: Clock = clock or SystemClock()
        self.store = ConversationMessageStore()
        self.summaries = SummaryProjection()
        self.pending = PendingMutations(pending_ttl_seconds, pending_max_entries)
        self.listeners = ListenerRegistry()
        self._viewers: list[str] = [local_user_id]
        self._open_views: dict[str, list[Subscription]] = {}

    @classmethod
    def from_settings(cls, settings: Settings, *, clock: Clock | None = None) -> ReconciliationContext:
        return cls(
            settings.LOCAL_USER_ID,
            clock=clock,
            pending_ttl_seconds=settings.PENDING_MUTATION_TTL_SECONDS,
            pending_max_entries=settings.PENDING_MUTATION_MAX,
        )

    # -- viewers -------------------------------------------------------------

    @property
    def viewers(self) -> tuple[str, ...]:
        return tuple(self._viewers)

    def track_viewer(self, viewer_id: str) -> bool:
        if viewer_id in self._viewers:
            return False
        self._viewers.append(viewer_id)
        return True

    # -- conversation views --------------------------------------------------

    def is_open(self, conversation_id: str) -> bool:
        return conversation_id in self._open_views

    def open_view(self, conversation_id: str, listener: Listener | None = None) -> None:
        subs = self._open_views.setdefault(conversation_id, [])
        if listener is not None:
            subs.append(self.listeners.subscribe(conversation_id, listener))

    def close_view(self, conversation_id: str) -> None:
        for sub in self._open_views.pop(conversation_id, []):
            self.listeners.unsubscribe(sub)

    def open_views(self) -> list[str]:
        return list(self._open_views)

    # -- reads for UI collaborators ------------------------------------------

    def visible_sequence(self, conversation_id: str, viewer_id: str | None = None) -> VisibleSequence:
        return self.store.visible_sequence(conversation_id, viewer_id or self.local_user_id)

    def last_message_summary(
        self,
        conversation_id: str,
        viewer_id: str | None = None,
    ) -> LastMessageSummary | None:
        return self.summaries.get(conversation_id, viewer_id or self.local_user_id)

    def contact_summaries(self, viewer_id: str | None = None) -> list[LastMessageSummary]:
        return self.summaries.for_viewer(viewer_id or self.local_user_id)

    def subscribe(self, conversation_id: str, listener: Listener) -> Subscription:
        return self.listeners.subscribe(conversation_id, listener)

    def unsubscribe(self, subscription: Subscription) -> None:
        self.listeners.unsubscribe(subscription)

    # -- lifecycle -----------------------------------------------------------

    def close(self) -> None:
        for conversation_id in list(self._open_views):
            self.close_view(conversation_id)
        self.listeners.clear()
        self.pending.clear()
        logger.info("Reconciliation context for %s closed", self.local_user_id)
