from __future__ import annotations

from datetime import timedelta

from chat_sync.application.pending import PendingMutations
from chat_sync.domain.events import MessageDeleted, MessageHidden
from tests.conftest import PEER, T0


def test_drain_returns_events_in_arrival_order():
    pending = PendingMutations(ttl_seconds=10, max_entries=10)
    first = MessageDeleted(PEER, "m1")
    second = MessageHidden(PEER, "m1", "alice")
    pending.park(PEER, "m1", first, T0)
    pending.park(PEER, "m1", second, T0)

    assert pending.drain(PEER, "m1", T0) == [first, second]
    assert len(pending) == 0
    assert pending.drain(PEER, "m1", T0) == []


def test_drain_drops_expired():
    pending = PendingMutations(ttl_seconds=10, max_entries=10)
    pending.park(PEER, "m1", MessageDeleted(PEER, "m1"), T0)

    assert pending.drain(PEER, "m1", T0 + timedelta(seconds=11)) == []
    assert len(pending) == 0


def test_expire_sweeps_old_entries():
    pending = PendingMutations(ttl_seconds=10, max_entries=10)
    pending.park(PEER, "old", MessageDeleted(PEER, "old"), T0)
    pending.park(PEER, "new", MessageDeleted(PEER, "new"), T0 + timedelta(seconds=8))

    assert pending.expire(T0 + timedelta(seconds=12)) == 1
    assert len(pending) == 1
    assert pending.drain(PEER, "new", T0 + timedelta(seconds=12)) == [MessageDeleted(PEER, "new")]


def test_capacity_evicts_oldest():
    pending = PendingMutations(ttl_seconds=60, max_entries=2)
    for mid in ("m1", "m2", "m3"):
        pending.park(PEER, mid, MessageDeleted(PEER, mid), T0)

    assert len(pending) == 2
    assert pending.drain(PEER, "m1", T0) == []
    assert pending.drain(PEER, "m3", T0) == [MessageDeleted(PEER, "m3")]


def test_zero_capacity_disables_buffering():
    pending = PendingMutations(ttl_seconds=60, max_entries=0)
    pending.park(PEER, "m1", MessageDeleted(PEER, "m1"), T0)
    assert len(pending) == 0
