"""
Game State Store - Holds the last authoritative snapshot and the chat log.

The store is the single place the client's view of the game lives:
- Snapshots are replaced wholesale, never merged
- Chat events are appended in arrival order
- A chat log replay replaces the whole log (safe to apply repeatedly)

Presentation code reads the store through read-only properties and the
derived queries below. Listeners are notified after every change, and
`revision` increases on every change for polling-style renderers.
"""

from __future__ import annotations
import logging
from typing import Callable, Iterable

from .state import ChatEvent, GameSnapshot, TurnPhase

logger = logging.getLogger(__name__)

StoreListener = Callable[["GameStateStore"], None]


class GameStateStore:
    """
    Client-side state container.

    Usage:
        store = GameStateStore()
        store.apply_snapshot(snapshot)
        store.append_chat(ChatEvent(message="hi", sender_id="p1"))

        if store.is_my_turn(my_id):
            ...
    """

    def __init__(self):
        self._snapshot = GameSnapshot.placeholder()
        self._chat_log: list[ChatEvent] = []
        self._revision = 0
        self._listeners: list[StoreListener] = []

    # =========================================================================
    # Read-only state
    # =========================================================================

    @property
    def snapshot(self) -> GameSnapshot:
        return self._snapshot

    @property
    def chat_log(self) -> tuple[ChatEvent, ...]:
        return tuple(self._chat_log)

    @property
    def revision(self) -> int:
        return self._revision

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Mutations
    # =========================================================================

    def apply_snapshot(self, snapshot: GameSnapshot):
        """Replace the held snapshot with the one just received."""
        logger.debug(
            "Applying snapshot: phase=%s players=%d",
            snapshot.phase.value,
            len(snapshot.players),
        )
        self._snapshot = snapshot
        self._changed()

    def append_chat(self, event: ChatEvent):
        """Append a single chat or system line."""
        self._chat_log.append(event)
        self._changed()

    def replace_chat_log(self, events: Iterable[ChatEvent]):
        """
        Replace the whole chat log with a server replay.

        Replays always carry the complete ordered log, so applying the
        same replay twice leaves the log unchanged.
        """
        self._chat_log = list(events)
        self._changed()

    def reset(self):
        """Drop all game state and return to the Intro placeholder."""
        self._snapshot = GameSnapshot.placeholder()
        self._chat_log = []
        self._changed()

    def _changed(self):
        self._revision += 1
        for listener in list(self._listeners):
            listener(self)

    # =========================================================================
    # Derived queries
    # =========================================================================

    @property
    def phase(self) -> TurnPhase:
        return self._snapshot.phase

    def is_in_lobby(self) -> bool:
        return self._snapshot.phase == TurnPhase.LOBBY

    def is_alive(self, player_id: str | None) -> bool:
        return self._snapshot.is_alive(player_id)

    def is_host(self, player_id: str | None) -> bool:
        return player_id is not None and self._snapshot.host == player_id

    def is_my_turn(self, player_id: str | None) -> bool:
        """Check whether the given player is expected to act in the current phase."""
        snapshot = self._snapshot
        if player_id is None:
            return False

        phase = snapshot.phase
        if phase == TurnPhase.VOTING:
            return snapshot.is_alive(player_id)
        if phase in (TurnPhase.ELECTING, TurnPhase.PRESIDENT_SELECT, TurnPhase.POWER):
            return snapshot.president == player_id
        if phase == TurnPhase.CHANCELLOR_SELECT:
            return snapshot.chancellor == player_id
        return False

    def nomination_candidates(self, president_id: str | None) -> list[str]:
        """
        Players the given president may nominate as chancellor.

        Everyone living in turn order except the last chancellor,
        the last president and the nominating president.
        """
        snapshot = self._snapshot
        excluded = {president_id, snapshot.last_chancellor, snapshot.last_president}
        return [
            player_id
            for player_id in snapshot.turn_order
            if player_id not in excluded and snapshot.is_alive(player_id)
        ]

    def remaining_voters(self) -> int:
        """Turn order size minus votes cast so far."""
        return max(len(self._snapshot.turn_order) - self._snapshot.votes, 0)
