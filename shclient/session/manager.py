"""
Session Manager - Creates and manages per-seat client sessions.

LIFECYCLE:
1. Manager created once with a shared identity backend
2. create_session(seat) wires identity store, channel, game store and
   controller for that seat, then opens the channel
3. During play:
   - Transport events, server events and user intents all go through
     the seat's controller, one at a time
   - The channel reconnects by itself; the controller re-authenticates
4. end_session(seat) shuts the channel down; durable identity stays so
   the seat can be resumed later

A seat is one independent player. Several seats on one client (local
multi-player testing) never share identity keys.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import time

from ..client_core.state import PolicyColor
from ..client_core.store import GameStateStore
from ..identity.store import IdentityStore
from ..transport.channel import (
    Connector,
    ConnectionState,
    RECONNECT_DELAY,
    Scheduler,
    TransportChannel,
)
from .controller import AuthPhase, DispatchResult, IntentKind, SessionController, UserIntent


@dataclass
class Session:
    """
    One seat's client session.

    Contains:
    - The transport channel for this seat
    - The game state store (read by presentation code)
    - The controller (the only writer of this seat's identity)

    Presentation code holds a Session and calls the intent methods below;
    it never builds wire messages itself.
    """
    seat_suffix: str
    channel: TransportChannel
    store: GameStateStore
    controller: SessionController
    created_at: float = field(default_factory=time.time)

    def start(self):
        """Open the connection. Re-authentication happens on open."""
        self.channel.open()

    def close(self):
        """Stop the connection and the reconnect loop."""
        self.channel.shutdown()

    # Observable state

    @property
    def connection_state(self) -> ConnectionState:
        return self.channel.state

    @property
    def auth_phase(self) -> AuthPhase:
        return self.controller.auth_phase

    @property
    def ready_to_join(self) -> bool:
        return self.controller.ready_to_join

    @property
    def player_id(self) -> str | None:
        return self.controller.player_id

    @property
    def alert(self) -> str | None:
        return self.controller.alert

    def is_my_turn(self) -> bool:
        return self.store.is_my_turn(self.player_id)

    # User intents

    def host(self, nickname: str) -> DispatchResult:
        return self._intent(IntentKind.HOST, nickname=nickname)

    def join(self, nickname: str, game_id: str) -> DispatchResult:
        return self._intent(IntentKind.JOIN, nickname=nickname, game_id=game_id)

    def start_game(self) -> DispatchResult:
        return self._intent(IntentKind.START_GAME)

    def nominate(self, target: str) -> DispatchResult:
        return self._intent(IntentKind.NOMINATE, target=target)

    def vote(self, vote: bool) -> DispatchResult:
        return self._intent(IntentKind.VOTE, vote=vote)

    def pick_card(self, color: PolicyColor) -> DispatchResult:
        return self._intent(IntentKind.PICK_CARD, color=color)

    def veto(self) -> DispatchResult:
        return self._intent(IntentKind.VETO)

    def use_power(self, target: str | None = None) -> DispatchResult:
        return self._intent(IntentKind.USE_POWER, target=target)

    def send_chat(self, message: str) -> DispatchResult:
        return self._intent(IntentKind.SEND_CHAT, message=message)

    def leave(self) -> DispatchResult:
        return self._intent(IntentKind.LEAVE)

    def dismiss_alert(self) -> DispatchResult:
        return self._intent(IntentKind.DISMISS_ALERT)

    def _intent(self, kind: IntentKind, **fields) -> DispatchResult:
        return self.controller.dispatch(UserIntent(kind=kind, **fields))


class SessionManager:
    """
    Manages seats.

    Responsibilities:
    - Build one Session per seat suffix
    - Share the identity backend between seats
    - Shut seats down
    """

    def __init__(
        self,
        identity_store: IdentityStore,
        connector_factory: Callable[[], Connector],
        scheduler: Scheduler,
        reconnect_delay: float = RECONNECT_DELAY,
    ):
        self.identity_store = identity_store
        self.connector_factory = connector_factory
        self.scheduler = scheduler
        self.reconnect_delay = reconnect_delay
        self._sessions: dict[str, Session] = {}

    def create_session(self, seat_suffix: str = "", start: bool = True) -> Session:
        """
        Create (and by default open) the session for a seat.

        Raises ValueError if the seat already has a live session.
        """
        if seat_suffix in self._sessions:
            raise ValueError(f"Seat {seat_suffix!r} already has a session")

        channel = TransportChannel(
            connector=self.connector_factory(),
            scheduler=self.scheduler,
            reconnect_delay=self.reconnect_delay,
        )
        store = GameStateStore()
        controller = SessionController(
            identity_store=self.identity_store,
            channel=channel,
            store=store,
            seat_suffix=seat_suffix,
        )
        channel.subscribe(controller.handle_channel_event)

        session = Session(
            seat_suffix=seat_suffix,
            channel=channel,
            store=store,
            controller=controller,
        )
        self._sessions[seat_suffix] = session

        if start:
            session.start()
        return session

    def get_session(self, seat_suffix: str = "") -> Session | None:
        return self._sessions.get(seat_suffix)

    def end_session(self, seat_suffix: str = ""):
        """Shut a seat's connection down. Durable identity is left in place."""
        session = self._sessions.pop(seat_suffix, None)
        if session:
            session.close()

    def list_seats(self) -> list[str]:
        return list(self._sessions)

    def close_all(self):
        for seat_suffix in list(self._sessions):
            self.end_session(seat_suffix)
