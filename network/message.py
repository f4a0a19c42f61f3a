'''
    Description:
        - Defines the Message value received from peers in the p2p network.
        - A Message is immutable once built, so the tracker can hand out the
          stored instance without copying it.
'''

# ========== Imports ==========
from pydantic import BaseModel, ConfigDict, Field


# ========== Message ==========
class Message(BaseModel):
    """Message received from a peer.

    `id` is the dedup and lookup key. `peer_id` only records which peer
    delivered it, two peers relaying the same id are the same message.
    `data` is opaque and never inspected.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    id: str = Field(..., min_length=1)
    peer_id: str = Field(default="")
    data: bytes = Field(default=b"")

    def __repr__(self):
        return f"<Message(id='{self.id}', peer_id='{self.peer_id}', size={len(self.data)})>"
