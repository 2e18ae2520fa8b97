"""
Inbound Events - Typed results of decoding a server message.

The codec turns every valid wire message into exactly one of these.
The session controller dispatches on the event class.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..client_core.state import ChatEvent, GameSnapshot


@dataclass(frozen=True)
class AlertReceived:
    """User-facing notice. Implies no state transition by itself."""
    message: str


@dataclass(frozen=True)
class IdentifiersAssigned:
    """New game id / player id / secret triple after hosting or joining."""
    game_id: str
    player_id: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class SnapshotReceived:
    snapshot: GameSnapshot


@dataclass(frozen=True)
class ChatReceived:
    event: ChatEvent


@dataclass(frozen=True)
class ChatLogReceived:
    """Complete ordered chat log replay."""
    events: tuple[ChatEvent, ...] = ()


InboundEvent = AlertReceived | IdentifiersAssigned | SnapshotReceived | ChatReceived | ChatLogReceived
