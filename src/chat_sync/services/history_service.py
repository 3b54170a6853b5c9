"""Conversation view lifecycle and bulk history loading."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from chat_sync.application.context import ReconciliationContext
from chat_sync.application.listeners import Listener
from chat_sync.application.ports.history import HistoryFetcher
from chat_sync.domain.entities.message import Message
from chat_sync.domain.value_objects.enums import ChangeReason
from chat_sync.services import reconcile_service, summary_service

logger = logging.getLogger(__name__)


async def open_conversation(
    peer_id: str,
    fetcher: HistoryFetcher,
    ctx: ReconciliationContext,
    listener: Listener | None = None,
) -> bool:
    """Open a view on the conversation with ``peer_id`` and load its history.

    Live events keep flowing while the fetch is in flight; the store revision
    taken here decides afterwards whether the response may replace the
    conversation or has to be merged into it.
    """
    ctx.open_view(peer_id, listener)
    revision = ctx.store.revision(peer_id)
    messages = await fetcher.fetch_history(ctx.local_user_id, peer_id)
    return apply_history(peer_id, messages, revision, ctx)


def apply_history(
    peer_id: str,
    messages: Sequence[Message],
    revision_at_issue: int,
    ctx: ReconciliationContext,
) -> bool:
    if not ctx.is_open(peer_id):
        logger.info("History for %s arrived after its view closed, ignoring", peer_id)
        return False
    if not messages:
        logger.debug("Empty history for %s", peer_id)
        return False

    if ctx.store.revision(peer_id) == revision_at_issue:
        ctx.store.replace_all(peer_id, messages, force=True)
    else:
        logger.debug("Conversation %s changed during history fetch, merging", peer_id)
        ctx.store.merge(peer_id, messages)

    changed = summary_service.resummarize(peer_id, ctx)
    summary_service.notify(peer_id, ChangeReason.HISTORY_LOADED, ctx, summaries=changed)
    logger.info("Loaded %d message(s) for %s", len(messages), peer_id)

    # Mutations for these messages may have been buffered while the fetch was in flight.
    replayed = reconcile_service.replay_pending(peer_id, [m.id for m in messages], ctx)
    if replayed:
        logger.debug("Replayed %d buffered mutation(s) for %s", replayed, peer_id)
    return True


def close_conversation(peer_id: str, ctx: ReconciliationContext) -> None:
    ctx.close_view(peer_id)
