from __future__ import annotations

import dataclasses
from datetime import timedelta

import pytest

from chat_sync.application.store import ConversationMessageStore
from tests.conftest import PEER, T0, make_message


@pytest.fixture
def store() -> ConversationMessageStore:
    return ConversationMessageStore()


def test_append_preserves_arrival_order(store):
    for mid in ("m1", "m2", "m3"):
        assert store.append(PEER, make_message(mid)) is True

    assert [m.id for m in store.messages(PEER)] == ["m1", "m2", "m3"]
    assert [m.seq for m in store.messages(PEER)] == [0, 1, 2]


def test_append_duplicate_is_ignored(store):
    store.append(PEER, make_message("m1", "first"))
    revision = store.revision(PEER)

    assert store.append(PEER, make_message("m1", "again")) is False
    assert len(store.messages(PEER)) == 1
    assert store.get(PEER, "m1").text == "first"
    assert store.revision(PEER) == revision


def test_mutate_keeps_position(store):
    for mid in ("m1", "m2", "m3"):
        store.append(PEER, make_message(mid))

    updated = store.mutate(PEER, "m2", {"text": "edited"})

    assert updated.text == "edited"
    assert [m.id for m in store.messages(PEER)] == ["m1", "m2", "m3"]
    assert store.messages(PEER)[1].text == "edited"


def test_mutate_missing_message_is_noop(store):
    assert store.mutate(PEER, "nope", {"text": "x"}) is None
    assert store.mutate("stranger", "nope", {"text": "x"}) is None


def test_mutate_rejects_identity_fields(store):
    store.append(PEER, make_message("m1"))
    with pytest.raises(ValueError):
        store.mutate(PEER, "m1", {"id": "m9"})


def test_mutate_with_same_values_does_not_bump_revision(store):
    store.append(PEER, make_message("m1", "hi"))
    revision = store.revision(PEER)

    store.mutate(PEER, "m1", {"text": "hi"})

    assert store.revision(PEER) == revision


def test_replace_all_only_into_empty_conversation(store):
    assert store.replace_all(PEER, [make_message("h1"), make_message("h2")]) is True
    assert store.replace_all(PEER, [make_message("h3")]) is False
    assert [m.id for m in store.messages(PEER)] == ["h1", "h2"]


def test_replace_all_forced(store):
    store.append(PEER, make_message("m1"))
    assert store.replace_all(PEER, [make_message("h1")], force=True) is True
    assert [m.id for m in store.messages(PEER)] == ["h1"]
    assert store.get(PEER, "m1") is None


def test_merge_unions_and_keeps_newest_version(store):
    store.append(PEER, make_message("m2", "live", minute=2))
    old = make_message("m1", "old", minute=1)
    stale_m2 = make_message("m2", "stale", minute=2)
    newer = dataclasses.replace(stale_m2, text="newest", updated_at=T0 + timedelta(minutes=9))

    store.merge(PEER, [old, newer])

    assert [m.id for m in store.messages(PEER)] == ["m1", "m2"]
    assert store.get(PEER, "m2").text == "newest"


def test_merge_keeps_local_visibility(store):
    store.append(PEER, make_message("m1", minute=1))
    store.mutate(PEER, "m1", {"hidden_for": frozenset({"alice"})})

    store.merge(PEER, [make_message("m1", minute=1)])

    assert store.get(PEER, "m1").is_hidden_for("alice")


def test_visible_sequence_excludes_hidden_for_viewer_only(store):
    for mid in ("m1", "m2", "m3"):
        store.append(PEER, make_message(mid))
    store.mutate(PEER, "m2", {"hidden_for": frozenset({"alice"})})
    store.mutate(PEER, "m3", {"deleted_for_all": True, "text": ""})

    alice = store.visible_sequence(PEER, "alice")
    bob = store.visible_sequence(PEER, "bob")

    assert [m.id for m in alice] == ["m1", "m3"]
    assert [m.id for m in bob] == ["m1", "m2", "m3"]
    assert [m.id for m in reversed(alice)] == ["m3", "m1"]


def test_visible_sequence_is_restartable_and_live(store):
    store.append(PEER, make_message("m1"))
    seq = store.visible_sequence(PEER, "alice")

    assert [m.id for m in seq] == ["m1"]
    assert [m.id for m in seq] == ["m1"]

    store.append(PEER, make_message("m2"))
    assert len(seq) == 2
    assert seq.last().id == "m2"


def test_visible_sequence_of_unknown_conversation_is_empty(store):
    seq = store.visible_sequence("nobody", "alice")
    assert list(seq) == []
    assert not seq
    assert seq.last() is None
