from __future__ import annotations

from typing import Union

from chat_sync.domain.events.message_deleted import MessageDeleted
from chat_sync.domain.events.message_edited import MessageEdited
from chat_sync.domain.events.message_hidden import MessageHidden
from chat_sync.domain.events.message_received import MessageReceived

InboundEvent = Union[MessageReceived, MessageEdited, MessageDeleted, MessageHidden]

# Events that target an existing message and may arrive before it.
MutationEvent = Union[MessageEdited, MessageDeleted, MessageHidden]

__all__ = [
    "InboundEvent",
    "MessageDeleted",
    "MessageEdited",
    "MessageHidden",
    "MessageReceived",
    "MutationEvent",
]
