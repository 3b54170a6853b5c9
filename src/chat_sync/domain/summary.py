"""Last-message derivation for the contact list."""
from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime

from chat_sync.domain.entities.message import Message
from chat_sync.domain.entities.summary import LastMessageSummary
from chat_sync.domain.preview import DELETED_PLACEHOLDER, preview_of


def summary_of(message: Message) -> LastMessageSummary:
    return LastMessageSummary(
        conversation_id=message.conversation_id,
        message_id=message.id,
        preview=preview_of(message),
        created_at=message.created_at,
        updated_at=message.updated_at,
        deleted=message.deleted_for_all,
    )


def fallback_summary(conversation_id: str, now: datetime) -> LastMessageSummary:
    return LastMessageSummary(
        conversation_id=conversation_id,
        message_id=uuid.uuid4().hex,
        preview=DELETED_PLACEHOLDER,
        created_at=now,
        updated_at=now,
        deleted=True,
        anchored=False,
    )


def derive_summary(
    conversation_id: str,
    newest_first: Iterable[Message],
    *,
    has_messages: bool,
    now: datetime,
    previous: LastMessageSummary | None = None,
) -> LastMessageSummary | None:
    """Summary for one viewer.

    ``newest_first`` is the viewer's visible sequence walked backwards, so the
    first element is the most recent message not hidden for them.
    """
    for message in newest_first:
        return summary_of(message)

    if not has_messages:
        return None
    if previous is not None and not previous.anchored:
        return previous
    return fallback_summary(conversation_id, now)
