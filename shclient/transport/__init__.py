"""
Transport Layer - The persistent connection to the game server.

Architecture:
    Connector (I/O) -> ChannelEvent -> TransportChannel -> subscribers

The channel owns the connection state and the reconnect timer.
Connectors only report what happened.
"""

from .channel import (
    TransportChannel,
    ConnectionState,
    ChannelEvent,
    ChannelEventKind,
    Connector,
    Scheduler,
    RECONNECT_DELAY,
)

__all__ = [
    "TransportChannel",
    "ConnectionState",
    "ChannelEvent",
    "ChannelEventKind",
    "Connector",
    "Scheduler",
    "RECONNECT_DELAY",
]
