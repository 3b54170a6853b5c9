"""Shared test fixtures."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from chat_sync.application.context import ReconciliationContext
from chat_sync.application.exceptions import UpstreamError
from chat_sync.domain.entities.message import Attachment, Message
from chat_sync.domain.events import MessageReceived
from chat_sync.domain.value_objects.enums import MediaKind, MessageSide

LOCAL_USER = "alice"
PEER = "bob"
T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@dataclass
class FakeClock:
    current: datetime = T0 + timedelta(hours=1)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ctx(clock: FakeClock) -> ReconciliationContext:
    return ReconciliationContext(LOCAL_USER, clock=clock, pending_ttl_seconds=30, pending_max_entries=100)


def make_message(
    message_id: str,
    text: str = "hello",
    *,
    conversation_id: str = PEER,
    sender_id: str = PEER,
    minute: int = 0,
    attachments: tuple[Attachment, ...] = (),
    caption: str | None = None,
) -> Message:
    ts = T0 + timedelta(minutes=minute)
    recipient = LOCAL_USER if sender_id != LOCAL_USER else conversation_id
    return Message(
        id=message_id,
        conversation_id=conversation_id,
        sender_id=sender_id,
        recipient_id=recipient,
        text=text,
        side=MessageSide.OWN if sender_id == LOCAL_USER else MessageSide.PEER,
        created_at=ts,
        updated_at=ts,
        attachments=attachments,
        caption=caption,
    )


def received(message_id: str, text: str = "hello", **kwargs: Any) -> MessageReceived:
    return MessageReceived(make_message(message_id, text, **kwargs))


def audio(url: str = "https://cdn.test/a.ogg") -> Attachment:
    return Attachment(kind=MediaKind.AUDIO, url=url, name="a.ogg", size=1024)


def image(url: str = "https://cdn.test/p.png") -> Attachment:
    return Attachment(kind=MediaKind.IMAGE, url=url, name="p.png", size=2048)


def wire_message(
    message_id: str,
    text: str = "hello",
    *,
    from_user_id: str = PEER,
    to_user_id: str = LOCAL_USER,
    minute: int = 0,
    attachments: list[dict[str, Any]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    ts = (T0 + timedelta(minutes=minute)).isoformat()
    return {
        "message_id": message_id,
        "from_user_id": from_user_id,
        "to_user_id": to_user_id,
        "message_text": text,
        "created_at": ts,
        "updated_at": ts,
        "attachments": attachments or [],
        **extra,
    }


@dataclass
class FakeHistoryFetcher:
    """History source that can be held open to simulate a slow response."""

    messages: list[Message] = field(default_factory=list)
    calls: list[tuple[str, str]] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def fetch_history(self, user_id: str, peer_id: str) -> list[Message]:
        self.calls.append((user_id, peer_id))
        if self.gate is not None:
            await self.gate.wait()
        return list(self.messages)


@dataclass
class FakeMessageActions:
    fail: bool = False
    calls: list[tuple[Any, ...]] = field(default_factory=list)

    async def delete_for_all(self, message_id: str) -> None:
        self._record("delete_for_all", message_id)

    async def delete_for_me(self, user_id: str, message_id: str) -> None:
        self._record("delete_for_me", user_id, message_id)

    async def edit(self, message_id: str, text: str) -> None:
        self._record("edit", message_id, text)

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if self.fail:
            raise UpstreamError(f"{call[0]} failed")
