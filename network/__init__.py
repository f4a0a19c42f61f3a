'''
    Description:
        - Bounded, deduplicating, order-preserving record of messages seen
          from peers in a p2p network.
        - Re-exports the tracker, the Message value, the errors and the
          configuration helpers for easy import.
'''

from .errors import FrameError, MessageNotFound, MessageTrackerError
from .message import Message
from .message_tracker import MessageTracker
from .frames import decode_frame, encode_frame
from .config import TrackerSettings, configure_logging, get_settings, new_message_tracker

__all__ = [
    "Message",
    "MessageTracker",
    "MessageTrackerError", "MessageNotFound", "FrameError",
    "encode_frame", "decode_frame",
    "TrackerSettings", "get_settings", "configure_logging", "new_message_tracker",
]
