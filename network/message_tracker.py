'''
    Description:
        - This module provides the MessageTracker, a bounded record of the last
          N distinct messages seen from peers.
        - Messages are kept first-in-first-out. A message whose id is already
          tracked is ignored, so the tracker doubles as the "seen ids" memory
          used to stop gossip loops.
'''

'''
    FIFO with an id index

    Backed by a single OrderedDict (hash map over a doubly linked list):
        - add / delete / message / membership are O(1) expected
        - eviction pops the head, deletion unlinks from the middle
        - order and index can never disagree since they are one structure

    Unlike an LRU set, a duplicate add does NOT move the entry to the end.
'''

# ========== Imports ==========
import logging
import threading
from collections import OrderedDict

from .errors import MessageNotFound
from .message import Message

log = logging.getLogger(__name__)


# ========== MessageTracker ==========
class MessageTracker:
    """Tracks a fixed number of messages in the order they were received.

    All operations run under one lock, so a receive loop can call `add`
    while other threads read or delete.
    """

    def __init__(self, capacity: int):
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise TypeError(f"capacity must be an int, got {type(capacity).__name__}")
        if capacity <= 0:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._messages: OrderedDict[str, Message] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def add(self, message: Message) -> None:
        """Add a message, evicting the oldest one if the tracker is full.

        Adding an id that is already tracked is a no-op: the first copy
        (and its peer_id) is kept where it is.
        """
        if not isinstance(message, Message):
            raise TypeError(f"expected Message, got {type(message).__name__}")

        with self._lock:
            if message.id in self._messages:
                log.debug("duplicate message %s from peer %r ignored", message.id, message.peer_id)
                return

            if len(self._messages) >= self._capacity:
                evicted_id, _ = self._messages.popitem(last=False)
                log.debug("tracker full (%d), evicted oldest message %s", self._capacity, evicted_id)

            self._messages[message.id] = message

    def delete(self, message_id: str) -> None:
        """Delete a message, keeping the remaining ones in order."""
        with self._lock:
            try:
                del self._messages[message_id]
            except KeyError:
                raise MessageNotFound(message_id) from None
        log.debug("deleted message %s", message_id)

    def message(self, message_id: str) -> Message:
        """Return the message for an id. The message stays in the tracker."""
        with self._lock:
            try:
                return self._messages[message_id]
            except KeyError:
                raise MessageNotFound(message_id) from None

    def messages(self) -> list[Message]:
        """Return a snapshot of all messages, oldest first."""
        with self._lock:
            return list(self._messages.values())

    def __contains__(self, message_id: object) -> bool:
        with self._lock:
            return message_id in self._messages

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def __repr__(self) -> str:
        with self._lock:
            return f"MessageTracker(capacity={self._capacity}, size={len(self._messages)})"
