'''
    Description:
        - Error types raised by the message tracker and the frame adapter.
'''


class MessageTrackerError(Exception):
    """Base class for errors raised by the network package."""


class MessageNotFound(MessageTrackerError, KeyError):
    """Raised by MessageTracker when no message with the given id is tracked."""

    def __init__(self, message_id: str):
        super().__init__(message_id)
        self.message_id = message_id

    # plain text, not the quoted repr KeyError would give
    def __str__(self) -> str:
        return f"message not found: {self.message_id}"


class FrameError(MessageTrackerError, ValueError):
    """Raised when a wire frame cannot be turned into a Message."""
