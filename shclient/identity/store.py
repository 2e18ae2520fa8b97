"""
Identity Store - Durable per-seat player identity.

Each seat keeps four string values under seat-suffixed keys:
    nickname<suffix>, gameId<suffix>, playerId<suffix>, playerSecret<suffix>

Rules:
- A player id without a secret (or the reverse) loads as no identity
- Only the session controller that owns a seat writes that seat's keys
- Clearing a seat removes all four keys
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace

from .backends import KeyValueBackend, MemoryBackend

logger = logging.getLogger(__name__)

NICKNAME_KEY = "nickname"
GAME_ID_KEY = "gameId"
PLAYER_ID_KEY = "playerId"
PLAYER_SECRET_KEY = "playerSecret"


@dataclass(frozen=True)
class SessionIdentity:
    """
    Who this seat is in which game.

    player_id and player_secret are opaque server-issued tokens.
    The secret is kept out of repr() so it never reaches logs.
    """
    seat_suffix: str = ""
    nickname: str | None = None
    game_id: str | None = None
    player_id: str | None = None
    player_secret: str | None = field(default=None, repr=False)

    @property
    def has_credentials(self) -> bool:
        return self.player_id is not None and self.player_secret is not None

    @property
    def can_reauthenticate(self) -> bool:
        """Enough stored identity to rejoin without asking the user."""
        return self.has_credentials and bool(self.nickname)

    def with_nickname(self, nickname: str | None) -> SessionIdentity:
        return replace(self, nickname=nickname)

    def with_credentials(self, game_id: str, player_id: str, player_secret: str) -> SessionIdentity:
        return replace(self, game_id=game_id, player_id=player_id, player_secret=player_secret)

    def cleared(self) -> SessionIdentity:
        return SessionIdentity(seat_suffix=self.seat_suffix)


class IdentityStore:
    """
    Seat-scoped view over a key-value backend.

    Usage:
        store = IdentityStore(JsonFileBackend(path))
        identity = store.load("-2")
        store.save(identity.with_nickname("anna"))
    """

    def __init__(self, backend: KeyValueBackend | None = None):
        self.backend = backend if backend is not None else MemoryBackend()

    def load(self, seat_suffix: str = "") -> SessionIdentity:
        """Read a seat's identity, dropping half-written credentials."""
        get = self.backend.get
        player_id = get(PLAYER_ID_KEY + seat_suffix)
        player_secret = get(PLAYER_SECRET_KEY + seat_suffix)

        if (player_id is None) != (player_secret is None):
            logger.warning("Seat %r has a half-written identity, ignoring credentials", seat_suffix)
            player_id = None
            player_secret = None

        return SessionIdentity(
            seat_suffix=seat_suffix,
            nickname=get(NICKNAME_KEY + seat_suffix),
            game_id=get(GAME_ID_KEY + seat_suffix),
            player_id=player_id,
            player_secret=player_secret,
        )

    def save(self, identity: SessionIdentity):
        """Write every field of the identity in one batch. None deletes the key."""
        suffix = identity.seat_suffix
        self.backend.update({
            NICKNAME_KEY + suffix: identity.nickname,
            GAME_ID_KEY + suffix: identity.game_id,
            PLAYER_ID_KEY + suffix: identity.player_id,
            PLAYER_SECRET_KEY + suffix: identity.player_secret,
        })

    def clear(self, seat_suffix: str = ""):
        """Remove all durable identity for a seat."""
        self.save(SessionIdentity(seat_suffix=seat_suffix))
