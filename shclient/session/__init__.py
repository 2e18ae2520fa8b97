"""
Session Module - One client session per seat.

A session ties together:
- The seat's durable identity (replayed on every reconnect)
- The transport channel (reconnects by itself)
- The game state store (last snapshot + chat log)

Sessions are built by the SessionManager and handed to presentation code;
nothing in the client is reached through module-level globals.
"""

from .manager import SessionManager, Session
from .controller import (
    SessionController,
    AuthPhase,
    UserIntent,
    IntentKind,
    DispatchResult,
)

__all__ = [
    "SessionManager",
    "Session",
    "SessionController",
    "AuthPhase",
    "UserIntent",
    "IntentKind",
    "DispatchResult",
]
