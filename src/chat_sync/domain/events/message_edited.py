from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class MessageEdited:
    conversation_id: str
    message_id: str
    text: str
    updated_at: datetime
    caption: str | None = None
