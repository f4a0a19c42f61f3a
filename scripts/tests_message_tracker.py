# scripts/tests_message_tracker.py
# Run: pytest scripts/tests_message_tracker.py
from __future__ import annotations

import logging
import threading

import pytest

from network import Message, MessageNotFound, MessageTracker


def msg(mid: str, peer: str = "peer-a", data: bytes = b"") -> Message:
    return Message(id=mid, peer_id=peer, data=data)


def ids(tracker: MessageTracker) -> list[str]:
    return [m.id for m in tracker.messages()]


# -------------------------- Construction --------------------------

def test_new_tracker_is_empty():
    tracker = MessageTracker(3)
    assert tracker.capacity == 3
    assert len(tracker) == 0
    assert tracker.messages() == []
    assert repr(tracker) == "MessageTracker(capacity=3, size=0)"


@pytest.mark.parametrize("capacity", [0, -1])
def test_non_positive_capacity_rejected(capacity):
    with pytest.raises(ValueError):
        MessageTracker(capacity)


@pytest.mark.parametrize("capacity", ["3", 2.0, None, True])
def test_non_int_capacity_rejected(capacity):
    with pytest.raises(TypeError):
        MessageTracker(capacity)


# -------------------------- Add / eviction --------------------------

def test_capacity_two_scenario():
    tracker = MessageTracker(2)
    tracker.add(msg("1"))
    tracker.add(msg("2"))
    tracker.add(msg("3"))

    assert ids(tracker) == ["2", "3"]
    with pytest.raises(MessageNotFound):
        tracker.message("1")


def test_fifo_eviction_keeps_relative_order():
    capacity = 5
    tracker = MessageTracker(capacity)
    for i in range(capacity + 1):
        tracker.add(msg(str(i)))

    assert "0" not in tracker
    assert ids(tracker) == ["1", "2", "3", "4", "5"]


def test_capacity_never_exceeded():
    tracker = MessageTracker(4)
    for i in range(50):
        tracker.add(msg(f"m{i % 13}"))
        assert len(tracker.messages()) <= 4
        assert len(tracker) <= 4


def test_eviction_removes_exactly_one():
    tracker = MessageTracker(3)
    for mid in "abc":
        tracker.add(msg(mid))
    tracker.add(msg("d"))
    assert ids(tracker) == ["b", "c", "d"]
    tracker.add(msg("e"))
    assert ids(tracker) == ["c", "d", "e"]


def test_add_rejects_non_message():
    tracker = MessageTracker(2)
    with pytest.raises(TypeError):
        tracker.add({"id": "1"})
    assert len(tracker) == 0


# -------------------------- Dedup --------------------------

def test_duplicate_add_is_noop():
    tracker = MessageTracker(3)
    tracker.add(msg("a"))
    tracker.add(msg("b"))
    tracker.add(msg("a"))

    assert ids(tracker) == ["a", "b"]
    assert len(tracker) == 2


def test_duplicate_does_not_refresh_position():
    # not an LRU: "a" is still the oldest and goes first
    tracker = MessageTracker(2)
    tracker.add(msg("a"))
    tracker.add(msg("b"))
    tracker.add(msg("a"))
    tracker.add(msg("c"))

    assert ids(tracker) == ["b", "c"]


def test_duplicate_keeps_first_peer():
    tracker = MessageTracker(2)
    first = msg("x", peer="peer-a", data=b"first")
    tracker.add(first)
    tracker.add(msg("x", peer="peer-b", data=b"second"))

    stored = tracker.message("x")
    assert stored is first
    assert stored.peer_id == "peer-a"
    assert stored.data == b"first"


def test_duplicate_at_capacity_evicts_nothing():
    tracker = MessageTracker(2)
    tracker.add(msg("a"))
    tracker.add(msg("b"))
    tracker.add(msg("b"))
    assert ids(tracker) == ["a", "b"]


def test_duplicate_logged_at_debug(caplog):
    tracker = MessageTracker(2)
    tracker.add(msg("a"))
    with caplog.at_level(logging.DEBUG, logger="network.message_tracker"):
        tracker.add(msg("a", peer="peer-z"))
    assert "duplicate message a" in caplog.text


# -------------------------- Lookup --------------------------

def test_message_lookup_returns_stored_value():
    tracker = MessageTracker(3)
    m = msg("abc", peer="peer-q", data=b"\x00\xff")
    tracker.add(m)

    got = tracker.message("abc")
    assert got == m
    assert len(tracker) == 1  # lookup is not a pop
    assert tracker.message("abc") == m


def test_message_not_found():
    tracker = MessageTracker(3)
    tracker.add(msg("a"))
    with pytest.raises(MessageNotFound) as exc:
        tracker.message("missing")
    assert exc.value.message_id == "missing"
    assert str(exc.value) == "message not found: missing"
    # still a KeyError for callers using plain dict-style handling
    assert isinstance(exc.value, KeyError)


def test_contains():
    tracker = MessageTracker(2)
    tracker.add(msg("a"))
    assert "a" in tracker
    assert "b" not in tracker


# -------------------------- Delete --------------------------

def test_delete_middle_preserves_order():
    tracker = MessageTracker(3)
    for mid in "abc":
        tracker.add(msg(mid))

    tracker.delete("b")
    assert ids(tracker) == ["a", "c"]


def test_delete_removes_exactly_one():
    tracker = MessageTracker(5)
    for mid in "abcde":
        tracker.add(msg(mid))

    tracker.delete("d")
    assert len(tracker) == 4
    assert ids(tracker) == ["a", "b", "c", "e"]


def test_delete_missing_leaves_state_unchanged():
    tracker = MessageTracker(3)
    tracker.add(msg("a"))
    tracker.add(msg("b"))
    before = tracker.messages()

    with pytest.raises(MessageNotFound):
        tracker.delete("zzz")
    assert tracker.messages() == before


def test_delete_twice_fails_second_time():
    tracker = MessageTracker(3)
    tracker.add(msg("a"))
    tracker.delete("a")
    with pytest.raises(MessageNotFound):
        tracker.delete("a")


def test_deleted_id_can_be_added_again_at_tail():
    tracker = MessageTracker(3)
    for mid in "abc":
        tracker.add(msg(mid))
    tracker.delete("a")
    tracker.add(msg("a"))
    assert ids(tracker) == ["b", "c", "a"]


def test_delete_frees_capacity():
    tracker = MessageTracker(2)
    tracker.add(msg("a"))
    tracker.add(msg("b"))
    tracker.delete("a")
    tracker.add(msg("c"))
    # room was made by the delete, so "b" survives
    assert ids(tracker) == ["b", "c"]


# -------------------------- Snapshot --------------------------

def test_messages_is_a_snapshot():
    tracker = MessageTracker(2)
    tracker.add(msg("a"))
    tracker.add(msg("b"))
    snap = tracker.messages()

    tracker.add(msg("c"))
    tracker.delete("b")
    assert [m.id for m in snap] == ["a", "b"]

    snap.clear()
    assert ids(tracker) == ["c"]


# -------------------------- Concurrency --------------------------

def test_concurrent_adds_and_deletes_keep_invariants():
    capacity = 64
    tracker = MessageTracker(capacity)
    errors: list[BaseException] = []

    def producer(prefix: str):
        try:
            for i in range(2000):
                tracker.add(msg(f"{prefix}-{i % 300}", peer=prefix))
        except BaseException as e:  # surfaced by the main thread
            errors.append(e)

    def reaper():
        try:
            for _ in range(2000):
                snap = tracker.messages()
                assert len(snap) <= capacity
                assert len({m.id for m in snap}) == len(snap)
                if snap:
                    try:
                        tracker.delete(snap[0].id)
                    except MessageNotFound:
                        pass  # raced with eviction
        except BaseException as e:
            errors.append(e)

    threads = [threading.Thread(target=producer, args=(p,)) for p in ("p1", "p2", "p3")]
    threads.append(threading.Thread(target=reaper))
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    final = tracker.messages()
    assert len(final) <= capacity
    assert len({m.id for m in final}) == len(final)
    assert len(tracker) == len(final)
