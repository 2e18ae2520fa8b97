"""
shclient - Secret Hitler Game Client

The client session and state-synchronization layer for a server-authoritative
social-deduction game. It provides:
- A persistent connection with automatic reconnection
- Durable per-seat identity, replayed to rejoin after a drop
- A local view made of the last server snapshot plus the chat log
- Phase-aware validation of player actions before anything is sent
"""

__version__ = "0.1.0"
