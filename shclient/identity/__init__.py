"""
Identity Module - Durable player identity per seat.

The identity store is the ONLY persistence in the client:
- Written when the server assigns an identity
- Replayed on every reconnect to rejoin the same game
- Cleared when the player leaves or the game ends

A seat is one independent player identity; several seats can share a
backend without colliding.
"""

from .store import IdentityStore, SessionIdentity
from .backends import KeyValueBackend, MemoryBackend, JsonFileBackend, IdentityStoreError

__all__ = [
    "IdentityStore",
    "SessionIdentity",
    "KeyValueBackend",
    "MemoryBackend",
    "JsonFileBackend",
    "IdentityStoreError",
]
