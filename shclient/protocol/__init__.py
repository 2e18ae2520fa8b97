"""
Protocol Layer - The tagged JSON message vocabulary spoken with the server.

Architecture:
    Command -> encode() -> text frame -> server
    server -> text frame -> decode() -> InboundEvent

Only this package knows the wire format.
"""

from .codec import ProtocolError, encode, decode, snapshot_from_payload
from .events import (
    InboundEvent,
    AlertReceived,
    IdentifiersAssigned,
    SnapshotReceived,
    ChatReceived,
    ChatLogReceived,
)

__all__ = [
    "ProtocolError",
    "encode",
    "decode",
    "snapshot_from_payload",
    "InboundEvent",
    "AlertReceived",
    "IdentifiersAssigned",
    "SnapshotReceived",
    "ChatReceived",
    "ChatLogReceived",
]
