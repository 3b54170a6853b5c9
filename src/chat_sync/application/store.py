"""In-memory per-conversation message lists."""
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from chat_sync.domain.entities.message import Message
from chat_sync.domain.visibility import merge_visibility

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = frozenset({
    "text",
    "caption",
    "attachments",
    "file_url",
    "file_name",
    "file_type",
    "audio_url",
    "video_url",
    "read_at",
    "updated_at",
    "deleted_for_all",
    "hidden_for",
})


class VisibleSequence:
    """Messages of one conversation as seen by one viewer.

    Backed by the live list, so every iteration reflects the current state
    and the sequence can be walked any number of times, in either direction.
    """

    __slots__ = ("_messages", "_viewer_id")

    def __init__(self, messages: list[Message], viewer_id: str) -> None:
        self._messages = messages
        self._viewer_id = viewer_id

    def __iter__(self) -> Iterator[Message]:
        return (m for m in self._messages if not m.is_hidden_for(self._viewer_id))

    def __reversed__(self) -> Iterator[Message]:
        return (m for m in reversed(self._messages) if not m.is_hidden_for(self._viewer_id))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return next(iter(self), None) is not None

    def last(self) -> Message | None:
        return next(reversed(self), None)


class ConversationMessageStore:
    """Ordered message lists keyed by conversation (the peer's user id).

    Order is arrival order, recorded as a per-conversation ``seq``. Every
    effective change bumps the conversation's revision, which lets callers
    tell whether anything happened while they were waiting on I/O.
    """

    def __init__(self) -> None:
        self._messages: dict[str, list[Message]] = {}
        self._index: dict[str, dict[str, int]] = {}
        self._next_seq: dict[str, int] = {}
        self._revisions: dict[str, int] = {}

    # -- reads ---------------------------------------------------------------

    def conversation_ids(self) -> list[str]:
        return list(self._messages)

    def has_messages(self, conversation_id: str) -> bool:
        return bool(self._messages.get(conversation_id))

    def messages(self, conversation_id: str) -> list[Message]:
        return list(self._messages.get(conversation_id, ()))

    def get(self, conversation_id: str, message_id: str) -> Message | None:
        pos = self._index.get(conversation_id, {}).get(message_id)
        if pos is None:
            return None
        return self._messages[conversation_id][pos]

    def last(self, conversation_id: str) -> Message | None:
        messages = self._messages.get(conversation_id)
        return messages[-1] if messages else None

    def revision(self, conversation_id: str) -> int:
        return self._revisions.get(conversation_id, 0)

    def visible_sequence(self, conversation_id: str, viewer_id: str) -> VisibleSequence:
        return VisibleSequence(self._conversation(conversation_id), viewer_id)

    # -- writes --------------------------------------------------------------

    def append(self, conversation_id: str, message: Message) -> bool:
        """Add at the end. Returns False if the id is already stored."""
        messages = self._conversation(conversation_id)
        index = self._index[conversation_id]
        if message.id in index:
            logger.debug("Duplicate message %s in %s ignored", message.id, conversation_id)
            return False

        seq = self._next_seq[conversation_id]
        self._next_seq[conversation_id] = seq + 1
        index[message.id] = len(messages)
        messages.append(dataclasses.replace(message, conversation_id=conversation_id, seq=seq))
        self._bump(conversation_id)
        return True

    def mutate(
        self,
        conversation_id: str,
        message_id: str,
        patch: Mapping[str, Any],
    ) -> Message | None:
        """Apply a partial update in place. Returns the new version, or None if absent."""
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be patched: {sorted(unknown)}")

        pos = self._index.get(conversation_id, {}).get(message_id)
        if pos is None:
            return None

        current = self._messages[conversation_id][pos]
        updated = dataclasses.replace(current, **patch)
        if updated != current:
            self._messages[conversation_id][pos] = updated
            self._bump(conversation_id)
        return updated

    def replace_all(
        self,
        conversation_id: str,
        messages: Iterable[Message],
        *,
        force: bool = False,
    ) -> bool:
        """Bulk load. Refuses to overwrite a non-empty conversation unless forced."""
        if self.has_messages(conversation_id) and not force:
            logger.debug("replace_all skipped for non-empty conversation %s", conversation_id)
            return False
        self._load(conversation_id, _dedupe(messages).values())
        return True

    def merge(self, conversation_id: str, messages: Iterable[Message]) -> None:
        """Union by message id, keeping the most recently updated copy of each."""
        merged = {m.id: m for m in self._messages.get(conversation_id, ())}
        for incoming in _dedupe(messages).values():
            existing = merged.get(incoming.id)
            if existing is None:
                merged[incoming.id] = incoming
                continue
            newer = incoming if incoming.updated_at > existing.updated_at else existing
            merged[incoming.id] = dataclasses.replace(newer, **merge_visibility(existing, incoming))

        ordered = sorted(merged.values(), key=lambda m: (m.created_at, m.id))
        if ordered != self._messages.get(conversation_id):
            self._load(conversation_id, ordered)

    # -- internals -----------------------------------------------------------

    def _conversation(self, conversation_id: str) -> list[Message]:
        if conversation_id not in self._messages:
            self._messages[conversation_id] = []
            self._index[conversation_id] = {}
            self._next_seq[conversation_id] = 0
        return self._messages[conversation_id]

    def _load(self, conversation_id: str, messages: Iterable[Message]) -> None:
        loaded = [
            dataclasses.replace(m, conversation_id=conversation_id, seq=seq)
            for seq, m in enumerate(messages)
        ]
        self._conversation(conversation_id)
        # The list object is kept so VisibleSequence views stay attached.
        self._messages[conversation_id][:] = loaded
        self._index[conversation_id] = {m.id: pos for pos, m in enumerate(loaded)}
        self._next_seq[conversation_id] = len(loaded)
        self._bump(conversation_id)

    def _bump(self, conversation_id: str) -> None:
        self._revisions[conversation_id] = self._revisions.get(conversation_id, 0) + 1


def _dedupe(messages: Iterable[Message]) -> dict[str, Message]:
    result: dict[str, Message] = {}
    for m in messages:
        seen = result.get(m.id)
        if seen is None or m.updated_at > seen.updated_at:
            result[m.id] = m
    return result
