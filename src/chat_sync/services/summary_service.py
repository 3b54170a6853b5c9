from __future__ import annotations

import logging
from collections.abc import Iterable

from chat_sync.application.context import ReconciliationContext
from chat_sync.application.listeners import ConversationChanged
from chat_sync.domain.entities.message import Message
from chat_sync.domain.entities.summary import LastMessageSummary
from chat_sync.domain.summary import derive_summary, summary_of
from chat_sync.domain.value_objects.enums import ChangeReason

logger = logging.getLogger(__name__)

Changed = dict[str, LastMessageSummary | None]


def resummarize(
    conversation_id: str,
    ctx: ReconciliationContext,
    *,
    viewers: Iterable[str] | None = None,
) -> Changed:
    """Rescan the conversation backwards for each viewer and publish the result.

    Returns the summaries that actually changed, keyed by viewer.
    """
    changed: Changed = {}
    has_messages = ctx.store.has_messages(conversation_id)
    now = ctx.clock.now()
    for viewer_id in viewers if viewers is not None else ctx.viewers:
        sequence = ctx.store.visible_sequence(conversation_id, viewer_id)
        summary = derive_summary(
            conversation_id,
            reversed(sequence),
            has_messages=has_messages,
            now=now,
            previous=ctx.summaries.get(conversation_id, viewer_id),
        )
        if ctx.summaries.publish(conversation_id, viewer_id, summary):
            changed[viewer_id] = summary
    return changed


def refresh_edited(message: Message, ctx: ReconciliationContext) -> Changed:
    """Republish from ``message`` alone, for viewers whose last visible message it is.

    Editing anything other than a viewer's last message leaves their summary as is.
    """
    changed: Changed = {}
    for viewer_id in ctx.viewers:
        tail = ctx.store.visible_sequence(message.conversation_id, viewer_id).last()
        if tail is None or tail.id != message.id:
            continue
        summary = summary_of(message)
        if ctx.summaries.publish(message.conversation_id, viewer_id, summary):
            changed[viewer_id] = summary
    return changed


def track_viewer(viewer_id: str, ctx: ReconciliationContext) -> None:
    """Start keeping ``viewer_id``'s summaries current, for every known conversation."""
    if not ctx.track_viewer(viewer_id):
        return
    for conversation_id in ctx.store.conversation_ids():
        resummarize(conversation_id, ctx, viewers=[viewer_id])
    logger.debug("Tracking summaries for viewer %s", viewer_id)


def notify(
    conversation_id: str,
    reason: ChangeReason,
    ctx: ReconciliationContext,
    *,
    message_id: str | None = None,
    summaries: Changed | None = None,
) -> None:
    ctx.listeners.notify(
        ConversationChanged(
            conversation_id=conversation_id,
            reason=reason,
            message_id=message_id,
            summaries=summaries or {},
        )
    )
