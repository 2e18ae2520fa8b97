"""
Client Core - Local game view and player-action validation.

The core:
1. Holds the last authoritative GameSnapshot (replaced, never merged)
2. Keeps the chat log in arrival order
3. Answers derived questions (whose turn, who may be nominated)
4. Validates player intents and builds outbound commands
"""

from .state import (
    GameSnapshot,
    PhaseInfo,
    PlayerView,
    ChatEvent,
    TurnPhase,
    PolicyColor,
    Role,
    PresidentialPower,
    VETO_UNLOCK_THRESHOLD,
)
from .command import Command, CommandType
from .store import GameStateStore
from .action_gate import ActionGate

__all__ = [
    "GameSnapshot",
    "PhaseInfo",
    "PlayerView",
    "ChatEvent",
    "TurnPhase",
    "PolicyColor",
    "Role",
    "PresidentialPower",
    "VETO_UNLOCK_THRESHOLD",
    "Command",
    "CommandType",
    "GameStateStore",
    "ActionGate",
]
