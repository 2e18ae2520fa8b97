"""
Session Controller - Connection, identity and inbound-event orchestration.

Every state change in a seat happens in dispatch(), on one of:
1. A transport event (ChannelEvent: opened / message / closed)
2. A decoded server event (AlertReceived, SnapshotReceived, ...)
3. A user intent (UserIntent: host, join, vote, leave, ...)

Each event is processed to completion before the next one.

Authentication phases (independent of the server's turn phase):
    UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED

- Channel opens with stored credentials: replay JoinGame + GetChatLog,
  go to AUTHENTICATING. Without credentials: stay UNAUTHENTICATED and
  report ready_to_join.
- SetIdentifiers: persist the triple, go to AUTHENTICATED.
- First snapshot while re-authenticating: the rejoin was accepted.
- Alert while AUTHENTICATING: the attempt failed, back to
  UNAUTHENTICATED. Durable identity is kept; alerts never clear it.
- Snapshot in the Ended phase: durable identity is cleared and the seat is
  back to UNAUTHENTICATED (free to host or join); the snapshot stays visible.
- Leave: optimistic; identity, chat, alert and snapshot are reset
  whether or not the server hears about it.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum

from ..client_core.action_gate import ActionGate
from ..client_core.command import Command
from ..client_core.state import PolicyColor
from ..client_core.store import GameStateStore
from ..identity.backends import IdentityStoreError
from ..identity.store import IdentityStore, SessionIdentity
from ..protocol import codec
from ..protocol.codec import ProtocolError
from ..protocol.events import (
    AlertReceived,
    ChatLogReceived,
    ChatReceived,
    IdentifiersAssigned,
    SnapshotReceived,
)
from ..transport.channel import ChannelEvent, ChannelEventKind, TransportChannel

logger = logging.getLogger(__name__)

BLANK_NICKNAME_ALERT = "You must enter a valid nickname to join the game."
BLANK_GAME_CODE_ALERT = "You must enter a valid game code to join the game."


class AuthPhase(Enum):
    """Where the seat stands with the server."""
    UNAUTHENTICATED = "unauthenticated"  # Must host or join
    AUTHENTICATING = "authenticating"  # Host/join/rejoin sent, no answer yet
    AUTHENTICATED = "authenticated"


class IntentKind(Enum):
    """Player-initiated actions."""
    HOST = "host"
    JOIN = "join"
    START_GAME = "start_game"
    NOMINATE = "nominate"
    VOTE = "vote"
    PICK_CARD = "pick_card"
    VETO = "veto"
    USE_POWER = "use_power"
    SEND_CHAT = "send_chat"
    LEAVE = "leave"
    DISMISS_ALERT = "dismiss_alert"


@dataclass(frozen=True)
class UserIntent:
    """
    A user action, before validation.

    Different kinds use different fields.
    """
    kind: IntentKind
    nickname: str | None = None
    game_id: str | None = None
    target: str | None = None
    vote: bool | None = None
    color: PolicyColor | None = None
    message: str | None = None


@dataclass
class DispatchResult:
    """
    Outcome of dispatching one event.

    `accepted` is False when the event was dropped: a gated intent that
    failed validation, or an inbound frame that could not be decoded.
    """
    accepted: bool = True
    sent: list[Command] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class SessionController:
    """
    Per-seat state machine over the identity store, channel and game store.

    The controller is the only writer of its seat's durable identity.
    """

    def __init__(
        self,
        identity_store: IdentityStore,
        channel: TransportChannel,
        store: GameStateStore,
        seat_suffix: str = "",
    ):
        self.identity_store = identity_store
        self.channel = channel
        self.store = store
        self.seat_suffix = seat_suffix

        self.identity: SessionIdentity = identity_store.load(seat_suffix)
        self.auth_phase = AuthPhase.UNAUTHENTICATED
        self.alert: str | None = None

        # Provisional; the next snapshot supersedes it
        self.pending_vote: bool | None = None

        # Kept after the game ends so the final view still knows who "you" are
        self._ended_player_id: str | None = None

    # =========================================================================
    # Observable state
    # =========================================================================

    @property
    def player_id(self) -> str | None:
        return self.identity.player_id or self._ended_player_id

    @property
    def connected(self) -> bool:
        return self.channel.is_open

    @property
    def ready_to_join(self) -> bool:
        """True when the user should be offered host/join."""
        return self.channel.is_open and self.auth_phase == AuthPhase.UNAUTHENTICATED

    def gate(self) -> ActionGate:
        return ActionGate(
            store=self.store,
            player_id=self.identity.player_id,
            connected=self.channel.is_open,
            authenticated=self.auth_phase == AuthPhase.AUTHENTICATED,
        )

    # =========================================================================
    # Dispatch
    # =========================================================================

    def dispatch(self, event) -> DispatchResult:
        """Apply one event of any kind."""
        if isinstance(event, ChannelEvent):
            return self._on_channel_event(event)
        if isinstance(event, UserIntent):
            return self._on_intent(event)
        return self._on_server_event(event)

    def handle_channel_event(self, event: ChannelEvent):
        """Subscriber hook for TransportChannel.subscribe()."""
        self.dispatch(event)

    # =========================================================================
    # Transport events
    # =========================================================================

    def _on_channel_event(self, event: ChannelEvent) -> DispatchResult:
        if event.kind == ChannelEventKind.OPENED:
            return self._on_open()

        if event.kind == ChannelEventKind.MESSAGE:
            try:
                inbound = codec.decode(event.data)
            except ProtocolError as e:
                logger.warning("Discarding malformed frame: %s", e)
                return DispatchResult(accepted=False, errors=[str(e)])
            logger.debug("Received %s", type(inbound).__name__)
            return self._on_server_event(inbound)

        # Closed: the channel schedules the reconnect; the next open
        # decides whether to re-authenticate.
        logger.info("Seat %r disconnected", self.seat_suffix)
        return DispatchResult()

    def _on_open(self) -> DispatchResult:
        result = DispatchResult()
        identity = self.identity
        if not identity.can_reauthenticate:
            self.auth_phase = AuthPhase.UNAUTHENTICATED
            return result

        logger.info("Re-authenticating seat %r as %s", self.seat_suffix, identity.player_id)
        self.auth_phase = AuthPhase.AUTHENTICATING
        self._send(
            Command.rejoin(
                nickname=identity.nickname,
                game_id=identity.game_id,
                player_id=identity.player_id,
                player_secret=identity.player_secret,
            ),
            result,
        )
        self._send(Command.get_chat_log(), result)
        return result

    # =========================================================================
    # Server events
    # =========================================================================

    def _on_server_event(self, event) -> DispatchResult:
        result = DispatchResult()

        if isinstance(event, AlertReceived):
            self.alert = event.message
            if self.auth_phase == AuthPhase.AUTHENTICATING:
                logger.warning("Authentication rejected: %s", event.message)
                self.auth_phase = AuthPhase.UNAUTHENTICATED

        elif isinstance(event, IdentifiersAssigned):
            logger.info("Seat %r assigned player %s", self.seat_suffix, event.player_id)
            self.identity = self.identity.with_credentials(
                game_id=event.game_id,
                player_id=event.player_id,
                player_secret=event.secret,
            )
            self._ended_player_id = None
            self._persist(result)
            self.auth_phase = AuthPhase.AUTHENTICATED

        elif isinstance(event, SnapshotReceived):
            self._on_snapshot(event, result)

        elif isinstance(event, ChatReceived):
            self.store.append_chat(event.event)

        elif isinstance(event, ChatLogReceived):
            self.store.replace_chat_log(event.events)

        else:
            logger.warning("Ignoring unknown event %r", event)
            result.accepted = False

        return result

    def _on_snapshot(self, event: SnapshotReceived, result: DispatchResult):
        snapshot = event.snapshot
        self.store.apply_snapshot(snapshot)
        self.pending_vote = None

        if self.auth_phase == AuthPhase.AUTHENTICATING and self.identity.has_credentials:
            self.auth_phase = AuthPhase.AUTHENTICATED

        if snapshot.is_terminal and self.identity.has_credentials:
            logger.info("Game over for seat %r, clearing identity", self.seat_suffix)
            self._ended_player_id = self.identity.player_id
            self.identity = self.identity.cleared()
            self._persist(result)
            self.auth_phase = AuthPhase.UNAUTHENTICATED

    # =========================================================================
    # User intents
    # =========================================================================

    def _on_intent(self, intent: UserIntent) -> DispatchResult:
        kind = intent.kind

        if kind == IntentKind.HOST:
            return self._host_or_join(intent.nickname, None, joining=False)
        if kind == IntentKind.JOIN:
            return self._host_or_join(intent.nickname, intent.game_id, joining=True)
        if kind == IntentKind.LEAVE:
            return self._leave()
        if kind == IntentKind.DISMISS_ALERT:
            self.alert = None
            return DispatchResult()

        gate = self.gate()
        if kind == IntentKind.START_GAME:
            command = gate.start_game()
        elif kind == IntentKind.NOMINATE:
            command = gate.nominate(intent.target)
        elif kind == IntentKind.VOTE:
            command = gate.vote(intent.vote)
            if command is not None:
                self.pending_vote = intent.vote
        elif kind == IntentKind.PICK_CARD:
            command = gate.pick_card(intent.color)
        elif kind == IntentKind.VETO:
            command = gate.veto()
        elif kind == IntentKind.USE_POWER:
            command = gate.use_power(intent.target)
        elif kind == IntentKind.SEND_CHAT:
            command = gate.send_chat(intent.message)
        else:
            command = None

        if command is None:
            return DispatchResult(accepted=False)
        result = DispatchResult()
        self._send(command, result)
        return result

    def _host_or_join(self, nickname: str | None, game_id: str | None, joining: bool) -> DispatchResult:
        if not self.ready_to_join:
            logger.debug("Host/join ignored: connected=%s phase=%s", self.connected, self.auth_phase.value)
            return DispatchResult(accepted=False)

        if not nickname or not nickname.strip():
            self.alert = BLANK_NICKNAME_ALERT
            return DispatchResult(accepted=False, errors=[BLANK_NICKNAME_ALERT])
        if joining and (not game_id or not game_id.strip()):
            self.alert = BLANK_GAME_CODE_ALERT
            return DispatchResult(accepted=False, errors=[BLANK_GAME_CODE_ALERT])

        result = DispatchResult()
        self.alert = None
        self.identity = self.identity.with_nickname(nickname)
        self._persist(result)

        if joining:
            command = Command.join_game(nickname, game_id.strip())
        else:
            command = Command.host_game(nickname)
        self.auth_phase = AuthPhase.AUTHENTICATING
        self._send(command, result)
        return result

    def _leave(self) -> DispatchResult:
        result = DispatchResult()
        if self.channel.is_open:
            self._send(Command.leave(), result)

        logger.info("Seat %r left the game", self.seat_suffix)
        self.identity = self.identity.cleared()
        self._ended_player_id = None
        self._persist(result)

        self.alert = None
        self.pending_vote = None
        self.auth_phase = AuthPhase.UNAUTHENTICATED
        self.store.reset()
        return result

    # =========================================================================
    # Helpers
    # =========================================================================

    def _send(self, command: Command, result: DispatchResult):
        try:
            frame = codec.encode(command)
        except ProtocolError as e:
            logger.error("Could not encode %s: %s", command.command_type.value, e)
            result.errors.append(str(e))
            return
        if self.channel.send(frame):
            logger.debug("Sent %s", command.command_type.value)
            result.sent.append(command)

    def _persist(self, result: DispatchResult):
        try:
            self.identity_store.save(self.identity)
        except IdentityStoreError as e:
            logger.error("Identity for seat %r not saved: %s", self.seat_suffix, e)
            result.errors.append(str(e))
