"""Applies push events to the session's conversation state.

Every function here runs to completion without awaiting: the store change,
the summary recomputation and the listener notification happen as one step,
so no other event can observe a half-applied mutation.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from chat_sync.application.context import ReconciliationContext
from chat_sync.domain import visibility
from chat_sync.domain.events import (
    InboundEvent,
    MessageDeleted,
    MessageEdited,
    MessageHidden,
    MessageReceived,
    MutationEvent,
)
from chat_sync.domain.value_objects.enums import ChangeReason, Transition
from chat_sync.services import summary_service

logger = logging.getLogger(__name__)


def apply_new_message(event: MessageReceived, ctx: ReconciliationContext) -> bool:
    """Append the message. Returns False for a repeated delivery."""
    message = event.message
    conversation_id = message.conversation_id
    if not ctx.store.append(conversation_id, message):
        return False

    changed = summary_service.resummarize(conversation_id, ctx)
    summary_service.notify(
        conversation_id, ChangeReason.APPENDED, ctx,
        message_id=message.id, summaries=changed,
    )

    replay_pending(conversation_id, [message.id], ctx)
    return True


def replay_pending(conversation_id: str, message_ids: Iterable[str], ctx: ReconciliationContext) -> int:
    """Apply mutations that were buffered before their messages were stored.

    Returns how many buffered events were replayed.
    """
    now = ctx.clock.now()
    replayed = 0
    for message_id in message_ids:
        for parked in ctx.pending.drain(conversation_id, message_id, now):
            logger.debug("Replaying buffered %s for message %s", type(parked).__name__, message_id)
            _apply_mutation(parked, ctx)
            replayed += 1
    return replayed


def apply_message_updated(event: MessageEdited, ctx: ReconciliationContext) -> Transition:
    current = ctx.store.get(event.conversation_id, event.message_id)
    if current is None:
        _park(event, ctx)
        return Transition.MISS
    if current.deleted_for_all:
        logger.debug("Edit of deleted message %s ignored", event.message_id)
        return Transition.UNCHANGED
    if event.updated_at < current.updated_at:
        logger.debug("Stale edit of message %s ignored", event.message_id)
        return Transition.UNCHANGED

    patch: visibility.Patch = {"text": event.text, "updated_at": event.updated_at}
    if event.caption is not None:
        patch["caption"] = event.caption
    elif current.attachments:
        # Attachment messages carry their text as the caption.
        patch["caption"] = event.text
    updated = ctx.store.mutate(event.conversation_id, event.message_id, patch)
    if updated is None or updated == current:
        return Transition.UNCHANGED

    changed = summary_service.refresh_edited(updated, ctx)
    summary_service.notify(
        event.conversation_id, ChangeReason.EDITED, ctx,
        message_id=event.message_id, summaries=changed,
    )
    return Transition.APPLIED


def apply_message_deleted(event: MessageDeleted, ctx: ReconciliationContext) -> Transition:
    current = ctx.store.get(event.conversation_id, event.message_id)
    if current is None:
        _park(event, ctx)
        return Transition.MISS

    transition, patch = visibility.delete_for_all(current, ctx.clock.now())
    if transition is not Transition.APPLIED:
        return transition
    ctx.store.mutate(event.conversation_id, event.message_id, patch)

    changed = summary_service.resummarize(event.conversation_id, ctx)
    summary_service.notify(
        event.conversation_id, ChangeReason.DELETED_FOR_ALL, ctx,
        message_id=event.message_id, summaries=changed,
    )
    return Transition.APPLIED


def apply_message_deleted_for_me(event: MessageHidden, ctx: ReconciliationContext) -> Transition:
    summary_service.track_viewer(event.viewer_id, ctx)
    current = ctx.store.get(event.conversation_id, event.message_id)
    if current is None:
        _park(event, ctx)
        return Transition.MISS

    transition, patch = visibility.delete_for_me(current, event.viewer_id)
    if transition is not Transition.APPLIED:
        return transition
    ctx.store.mutate(event.conversation_id, event.message_id, patch)

    changed = summary_service.resummarize(event.conversation_id, ctx, viewers=[event.viewer_id])
    summary_service.notify(
        event.conversation_id, ChangeReason.DELETED_FOR_ME, ctx,
        message_id=event.message_id, summaries=changed,
    )
    return Transition.APPLIED


def handle_event(event: InboundEvent, ctx: ReconciliationContext) -> bool:
    """Apply one event in isolation. Returns True if local state changed.

    A failure while applying is logged and swallowed so a single bad event
    cannot stall the stream.
    """
    ctx.pending.expire(ctx.clock.now())
    try:
        if isinstance(event, MessageReceived):
            return apply_new_message(event, ctx)
        return _apply_mutation(event, ctx) is Transition.APPLIED
    except Exception:
        logger.exception("Failed to apply %s", type(event).__name__)
        return False


def _apply_mutation(event: MutationEvent, ctx: ReconciliationContext) -> Transition:
    if isinstance(event, MessageEdited):
        return apply_message_updated(event, ctx)
    if isinstance(event, MessageDeleted):
        return apply_message_deleted(event, ctx)
    if isinstance(event, MessageHidden):
        return apply_message_deleted_for_me(event, ctx)
    raise TypeError(f"Unsupported event {type(event).__name__}")


def _park(event: MutationEvent, ctx: ReconciliationContext) -> None:
    logger.info(
        "%s references unknown message %s in %s, buffering",
        type(event).__name__, event.message_id, event.conversation_id,
    )
    ctx.pending.park(event.conversation_id, event.message_id, event, ctx.clock.now())
