from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from chat_sync.domain.value_objects.enums import MediaKind, MessageSide


@dataclass(frozen=True, slots=True)
class Attachment:
    kind: MediaKind
    url: str
    name: str
    size: int = 0


@dataclass(frozen=True, slots=True)
class Message:
    id: str
    conversation_id: str
    sender_id: str
    recipient_id: str
    text: str
    side: MessageSide
    created_at: datetime
    updated_at: datetime
    attachments: tuple[Attachment, ...] = ()
    caption: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    file_type: str | None = None
    audio_url: str | None = None
    video_url: str | None = None
    read_at: datetime | None = None
    deleted_for_all: bool = False
    hidden_for: frozenset[str] = field(default_factory=frozenset)
    seq: int = 0

    def is_hidden_for(self, viewer_id: str) -> bool:
        return viewer_id in self.hidden_for
