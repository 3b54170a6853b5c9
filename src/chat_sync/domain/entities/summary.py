from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class LastMessageSummary:
    """Contact-list projection of a conversation's most relevant message.

    ``anchored`` is False for the placeholder published when every message
    of the conversation is hidden for the viewer; its ``message_id`` is then
    generated and points at nothing in the store.
    """

    conversation_id: str
    message_id: str
    preview: str
    created_at: datetime
    updated_at: datetime
    deleted: bool = False
    anchored: bool = True
