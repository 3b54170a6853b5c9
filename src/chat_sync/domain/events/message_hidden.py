from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MessageHidden:
    """A single viewer removed the message from their own history."""

    conversation_id: str
    message_id: str
    viewer_id: str
