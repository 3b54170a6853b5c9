from __future__ import annotations

import dataclasses
from datetime import datetime, timezone

from chat_sync.domain.entities.message import Attachment, Message
from chat_sync.domain.events import (
    InboundEvent,
    MessageDeleted,
    MessageEdited,
    MessageHidden,
    MessageReceived,
)
from chat_sync.domain.value_objects.enums import MediaKind, MessageSide
from chat_sync.domain.visibility import delete_for_all, delete_for_me
from chat_sync.infrastructure.push.protocol import (
    HistoryItem,
    InboundPayload,
    MessageDeletedForMePayload,
    MessageDeletedPayload,
    MessageUpdatedPayload,
    NewMessagePayload,
    WireMessage,
)


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def peer_of(payload: WireMessage, local_user_id: str) -> str:
    """Conversation key on this side: the other participant's id."""
    if payload.from_user_id == local_user_id:
        return payload.to_user_id
    return payload.from_user_id


def wire_to_message(
    payload: WireMessage,
    local_user_id: str,
    conversation_id: str | None = None,
) -> Message:
    created_at = _aware(payload.created_at)
    updated_at = _aware(payload.updated_at) if payload.updated_at else created_at
    text = payload.message_text or ""
    attachments = tuple(
        Attachment(
            kind=MediaKind.from_media_type(a.media_type),
            url=a.media_url,
            name=a.media_name,
            size=a.media_size,
        )
        for a in payload.attachments
    )

    media: dict[str, str | None] = {}
    caption = None
    if attachments:
        first, raw = attachments[0], payload.attachments[0]
        caption = text
        if first.kind is MediaKind.AUDIO:
            media = {"audio_url": first.url}
        elif first.kind is MediaKind.VIDEO:
            media = {"video_url": first.url, "file_name": first.name, "file_type": raw.media_type}
        else:
            media = {"file_url": first.url, "file_name": first.name, "file_type": raw.media_type}

    return Message(
        id=payload.message_id,
        conversation_id=conversation_id or peer_of(payload, local_user_id),
        sender_id=payload.from_user_id,
        recipient_id=payload.to_user_id,
        text=text,
        side=MessageSide.OWN if payload.from_user_id == local_user_id else MessageSide.PEER,
        created_at=created_at,
        updated_at=updated_at,
        attachments=attachments,
        caption=caption,
        **media,
    )


def payload_to_event(payload: InboundPayload, local_user_id: str) -> InboundEvent:
    if isinstance(payload, NewMessagePayload):
        return MessageReceived(wire_to_message(payload, local_user_id))

    if isinstance(payload, MessageUpdatedPayload):
        text = payload.message_text or ""
        ts = payload.updated_at or payload.created_at
        return MessageEdited(
            conversation_id=peer_of(payload, local_user_id),
            message_id=payload.message_id,
            text=text,
            caption=text if payload.attachments else None,
            updated_at=_aware(ts),
        )

    if isinstance(payload, MessageDeletedPayload):
        return MessageDeleted(conversation_id=payload.contact_id, message_id=payload.message_id)

    if isinstance(payload, MessageDeletedForMePayload):
        return MessageHidden(
            conversation_id=payload.contact_id,
            message_id=payload.message_id,
            viewer_id=payload.user_id or local_user_id,
        )

    raise TypeError(f"Unsupported payload {type(payload).__name__}")


def history_item_to_message(item: HistoryItem, local_user_id: str, conversation_id: str) -> Message:
    message = wire_to_message(item, local_user_id, conversation_id)
    if item.read_at is not None:
        message = dataclasses.replace(message, read_at=_aware(item.read_at))
    if item.is_deleted:
        _, patch = delete_for_all(message, message.updated_at)
        message = dataclasses.replace(message, **patch)
    if not item.is_visible:
        _, patch = delete_for_me(message, local_user_id)
        message = dataclasses.replace(message, **patch)
    return message
