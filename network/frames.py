'''
    Description:
        - Converts between JSON wire frames and Message values, so a receive
          loop can hand the tracker a Message without the tracker knowing
          anything about the wire.
        - Frames are canonical JSON; the opaque payload travels as unpadded
          base64url.
'''

'''
    Frame shape:

    {
        "type": "PEER_MESSAGE",
        "id":   "<message id>",
        "from": "<peer id>",
        "payload": {"data": "<base64url, no padding>"}
    }
'''

# ========== Imports ==========
import base64
import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from .errors import FrameError
from .message import Message

log = logging.getLogger(__name__)

T_PEER_MESSAGE = "PEER_MESSAGE"


# ========== Encoding helpers ==========
# unpadded base64url, nothing else
_B64URL_TEXT = re.compile(r"[A-Za-z0-9_-]*")

# sorted keys + compact separators: same object, same bytes
_CANONICAL = json.JSONEncoder(
    separators=(",", ":"),
    sort_keys=True,
    ensure_ascii=False,
    allow_nan=False,
)


def base64url_encode(raw: bytes) -> str:
    return base64.b64encode(raw, altchars=b"-_").rstrip(b"=").decode("ascii")


def base64url_decode(text: str) -> bytes:
    """Decode unpadded base64url, rejecting anything the encoder would not produce.

    Raises ValueError for characters outside the url-safe alphabet (including
    "+", "/", whitespace and "=") and for lengths that cannot hold whole bytes.
    """
    if not _B64URL_TEXT.fullmatch(text):
        raise ValueError("characters outside the base64url alphabet")
    if len(text) % 4 == 1:
        raise ValueError(f"length {len(text)} is not a valid unpadded base64url length")
    return base64.b64decode(text + "=" * (-len(text) % 4), altchars=b"-_", validate=True)


def canonical_json(obj: Any) -> bytes:
    return _CANONICAL.encode(obj).encode("utf-8")


# ========== Frames ==========
def encode_frame(message: Message) -> bytes:
    """Serialise a Message into a canonical PEER_MESSAGE frame."""
    return canonical_json({
        "type": T_PEER_MESSAGE,
        "id": message.id,
        "from": message.peer_id,
        "payload": {"data": base64url_encode(message.data)},
    })


def decode_frame(raw: bytes | str | dict, peer_id: str | None = None) -> Message:
    """Parse a PEER_MESSAGE frame into a Message.

    `peer_id` overrides the frame's "from" field when the transport knows
    which peer actually delivered the frame.
    """
    if isinstance(raw, dict):
        frame = raw
    else:
        try:
            frame = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            log.warning("dropping unparsable frame: %s", e)
            raise FrameError(f"frame is not valid JSON: {e}") from e

    if not isinstance(frame, dict):
        raise FrameError("frame must be a JSON object")
    if frame.get("type") != T_PEER_MESSAGE:
        raise FrameError(f"unexpected frame type {frame.get('type')!r}")

    payload = frame.get("payload")
    encoded = payload.get("data", "") if isinstance(payload, dict) else None
    if not isinstance(encoded, str):
        raise FrameError("frame payload.data must be a base64url string")

    try:
        data = base64url_decode(encoded)
    except ValueError as e:
        log.warning("frame %r has bad payload encoding: %s", frame.get("id"), e)
        raise FrameError(f"payload.data is not base64url: {e}") from e

    try:
        return Message(
            id=frame.get("id"),
            peer_id=frame.get("from", "") if peer_id is None else peer_id,
            data=data,
        )
    except ValidationError as e:
        log.warning("frame %r rejected: %s", frame.get("id"), e)
        raise FrameError(f"invalid message fields: {e}") from e
