from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MessageDeleted:
    """The sender removed the message for every participant."""

    conversation_id: str
    message_id: str
