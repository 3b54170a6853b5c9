"""Local user actions: forwarded to the backend, then reconciled locally.

The push echo of each action arrives later and is absorbed as a replay.
"""
from __future__ import annotations

import logging
from typing import Any

from chat_sync.application.context import ReconciliationContext
from chat_sync.application.exceptions import (
    MalformedEventError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from chat_sync.application.ports.actions import MessageActions
from chat_sync.domain.entities.message import Message
from chat_sync.domain.events import MessageDeleted, MessageEdited, MessageHidden, MessageReceived
from chat_sync.infrastructure.push.mappers import wire_to_message
from chat_sync.infrastructure.push.protocol import NewMessagePayload
from chat_sync.services import reconcile_service

logger = logging.getLogger(__name__)


def echo_sent_message(response: dict[str, Any], ctx: ReconciliationContext) -> Message:
    """Show a just-sent message before its push delivery arrives."""
    try:
        payload = NewMessagePayload.model_validate(response)
    except ValueError as exc:
        raise MalformedEventError("newMessage", str(exc)) from exc
    message = wire_to_message(payload, ctx.local_user_id)
    reconcile_service.apply_new_message(MessageReceived(message), ctx)
    return ctx.store.get(message.conversation_id, message.id) or message


async def delete_for_all(
    conversation_id: str,
    message_id: str,
    actions: MessageActions,
    ctx: ReconciliationContext,
) -> bool:
    _require(conversation_id, message_id, ctx)
    try:
        await actions.delete_for_all(message_id)
    except UpstreamError as exc:
        logger.warning("Delete-for-all of %s failed: %s", message_id, exc.detail)
        return False
    reconcile_service.apply_message_deleted(MessageDeleted(conversation_id, message_id), ctx)
    return True


async def delete_for_me(
    conversation_id: str,
    message_id: str,
    actions: MessageActions,
    ctx: ReconciliationContext,
) -> bool:
    _require(conversation_id, message_id, ctx)
    try:
        await actions.delete_for_me(ctx.local_user_id, message_id)
    except UpstreamError as exc:
        logger.warning("Delete-for-me of %s failed: %s", message_id, exc.detail)
        return False
    reconcile_service.apply_message_deleted_for_me(
        MessageHidden(conversation_id, message_id, ctx.local_user_id), ctx,
    )
    return True


async def edit_message(
    conversation_id: str,
    message_id: str,
    text: str,
    actions: MessageActions,
    ctx: ReconciliationContext,
) -> bool:
    message = _require(conversation_id, message_id, ctx)
    if message.deleted_for_all:
        raise ValidationError("Deleted messages cannot be edited")
    try:
        await actions.edit(message_id, text)
    except UpstreamError as exc:
        logger.warning("Edit of %s failed: %s", message_id, exc.detail)
        return False
    reconcile_service.apply_message_updated(
        MessageEdited(
            conversation_id=conversation_id,
            message_id=message_id,
            text=text,
            caption=text if message.attachments else None,
            updated_at=ctx.clock.now(),
        ),
        ctx,
    )
    return True


def _require(conversation_id: str, message_id: str, ctx: ReconciliationContext) -> Message:
    message = ctx.store.get(conversation_id, message_id)
    if message is None:
        raise NotFoundError("Message not found")
    return message
