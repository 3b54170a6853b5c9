from __future__ import annotations

from chat_sync.application.listeners import ALL_CONVERSATIONS, ConversationChanged, ListenerRegistry
from chat_sync.domain.value_objects.enums import ChangeReason
from tests.conftest import PEER


def _change(conversation_id: str = PEER) -> ConversationChanged:
    return ConversationChanged(conversation_id=conversation_id, reason=ChangeReason.APPENDED)


def test_notify_reaches_conversation_and_wildcard_listeners():
    registry = ListenerRegistry()
    seen_peer, seen_all, seen_other = [], [], []
    registry.subscribe(PEER, seen_peer.append)
    registry.subscribe(ALL_CONVERSATIONS, seen_all.append)
    registry.subscribe("carol", seen_other.append)

    registry.notify(_change())

    assert len(seen_peer) == 1
    assert len(seen_all) == 1
    assert seen_other == []


def test_unsubscribe_stops_delivery():
    registry = ListenerRegistry()
    seen = []
    sub = registry.subscribe(PEER, seen.append)
    registry.unsubscribe(sub)

    registry.notify(_change())

    assert seen == []
    assert registry.count(PEER) == 0


def test_failing_listener_is_removed():
    registry = ListenerRegistry()
    seen = []

    def _broken(_change):
        raise RuntimeError("view torn down")

    registry.subscribe(PEER, _broken)
    registry.subscribe(PEER, seen.append)

    registry.notify(_change())
    registry.notify(_change())

    assert len(seen) == 2
    assert registry.count(PEER) == 1


def test_unsubscribe_all():
    registry = ListenerRegistry()
    registry.subscribe(PEER, lambda c: None)
    registry.subscribe(PEER, lambda c: None)

    assert registry.unsubscribe_all(PEER) == 2
    assert registry.count(PEER) == 0


def test_same_callable_subscribed_twice_is_owned_separately():
    registry = ListenerRegistry()
    seen = []
    first = registry.subscribe(PEER, seen.append)
    second = registry.subscribe(PEER, seen.append)

    registry.notify(_change())
    assert len(seen) == 2

    registry.unsubscribe(first)
    registry.notify(_change())

    assert len(seen) == 3
    assert registry.count(PEER) == 1

    registry.unsubscribe(second)
    assert registry.count(PEER) == 0


def test_unsubscribe_twice_is_harmless():
    registry = ListenerRegistry()
    sub = registry.subscribe(PEER, lambda c: None)
    keep = registry.subscribe(PEER, lambda c: None)

    registry.unsubscribe(sub)
    registry.unsubscribe(sub)

    assert registry.count(PEER) == 1
    registry.unsubscribe(keep)
