# scripts/tests_frames.py
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from network import FrameError, Message, MessageTracker, decode_frame, encode_frame
from network.frames import base64url_decode, base64url_encode, canonical_json


# -------------------------- Message --------------------------

def test_message_is_frozen():
    m = Message(id="1", peer_id="p", data=b"x")
    with pytest.raises(ValidationError):
        m.id = "2"


def test_message_defaults_and_equality():
    a = Message(id="1")
    assert a.peer_id == ""
    assert a.data == b""
    assert a == Message(id="1", peer_id="", data=b"")
    assert hash(a) == hash(Message(id="1"))


@pytest.mark.parametrize("fields", [
    {"id": ""},
    {"id": 1},
    {"id": "1", "data": "not-bytes"},
    {"id": "1", "peer_id": None},
])
def test_message_validation(fields):
    with pytest.raises(ValidationError):
        Message(**fields)


# -------------------------- Helpers --------------------------

def test_base64url_no_padding():
    for raw in [b"", b"A", b"OK", b"hi", b"\x00\xff\x10"]:
        enc = base64url_encode(raw)
        assert "=" not in enc
        assert base64url_decode(enc) == raw


@pytest.mark.parametrize("text", ["aG+k", "aG/k", "aGk=", "a b", "@@@@", "abcde"])
def test_base64url_decode_is_strict(text):
    with pytest.raises(ValueError):
        base64url_decode(text)


def test_canonical_json_stable():
    assert canonical_json({"z": 1, "a": [2, {"k": 3}]}) == b'{"a":[2,{"k":3}],"z":1}'
    assert canonical_json({"b": 1, "a": 2}) == canonical_json({"a": 2, "b": 1})


# -------------------------- Frames --------------------------

def test_encode_frame_shape():
    raw = encode_frame(Message(id="m1", peer_id="peer-a", data=b"hi"))
    assert raw == b'{"from":"peer-a","id":"m1","payload":{"data":"aGk"},"type":"PEER_MESSAGE"}'


def test_decode_frame_from_bytes_str_and_dict():
    m = Message(id="m1", peer_id="peer-a", data=b"\x00payload\xff")
    raw = encode_frame(m)
    assert decode_frame(raw) == m
    assert decode_frame(raw.decode("utf-8")) == m
    assert decode_frame(json.loads(raw)) == m


def test_decode_frame_peer_override():
    raw = encode_frame(Message(id="m1", peer_id="claimed", data=b"x"))
    got = decode_frame(raw, peer_id="actual")
    assert got.peer_id == "actual"
    assert got.id == "m1"


def test_decode_frame_missing_data_is_empty_payload():
    got = decode_frame({"type": "PEER_MESSAGE", "id": "m1", "from": "p", "payload": {}})
    assert got.data == b""


@pytest.mark.parametrize("raw", [
    b"{not json",
    b"\x80abc",
    "[1, 2, 3]",
    {"type": "HEARTBEAT", "id": "m1", "payload": {"data": ""}},
    {"type": "PEER_MESSAGE", "id": "m1"},
    {"type": "PEER_MESSAGE", "id": "m1", "payload": {"data": 5}},
    {"type": "PEER_MESSAGE", "id": "m1", "payload": {"data": "é"}},
    {"type": "PEER_MESSAGE", "id": "m1", "payload": {"data": "@@@@"}},
    {"type": "PEER_MESSAGE", "id": "m1", "payload": {"data": "a b=c"}},
    {"type": "PEER_MESSAGE", "id": "m1", "payload": {"data": "aG+k"}},
    {"type": "PEER_MESSAGE", "id": "m1", "payload": {"data": "aGk="}},
    {"type": "PEER_MESSAGE", "id": "m1", "payload": {"data": "aGkA1"}},
    {"type": "PEER_MESSAGE", "payload": {"data": ""}},
    {"type": "PEER_MESSAGE", "id": "", "payload": {"data": ""}},
])
def test_decode_frame_errors(raw):
    with pytest.raises(FrameError):
        decode_frame(raw)


def test_replayed_frames_tracked_once():
    tracker = MessageTracker(10)
    raw = encode_frame(Message(id="gossip-1", peer_id="peer-a", data=b"hello"))

    # same frame relayed back by two peers
    for peer in ("peer-a", "peer-b", "peer-c"):
        tracker.add(decode_frame(raw, peer_id=peer))

    assert len(tracker) == 1
    assert tracker.message("gossip-1").peer_id == "peer-a"
