"""
Protocol Codec - Encodes commands and decodes server messages.

The codec:
1. Maps Command objects onto the outbound wire schemas
2. Parses inbound frames against the tagged ServerMessage union
3. Converts wire payloads into immutable client_core types

Any decode failure (bad JSON, unknown type, schema violation) raises
ProtocolError. Callers discard the frame and keep their prior state.
"""

from __future__ import annotations
import logging
from typing import Callable

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..client_core.command import Command, CommandType
from ..client_core.state import ChatEvent, GameSnapshot, PhaseInfo, PlayerView
from .events import (
    AlertReceived,
    ChatLogReceived,
    ChatReceived,
    IdentifiersAssigned,
    InboundEvent,
    SnapshotReceived,
)
from .schemas import (
    Alert,
    ChatLine,
    ChatLog,
    ChooseChancellor,
    GameStateMessage,
    GetChatLog,
    HostGame,
    JoinGame,
    Leave,
    PickCard,
    PresidentialPowerCommand,
    ReceiveChat,
    SendChat,
    ServerMessage,
    SetIdentifiers,
    SnapshotPayload,
    StartGame,
    VetoCard,
    VoteChancellor,
)

logger = logging.getLogger(__name__)

_server_messages = TypeAdapter(ServerMessage)


class ProtocolError(Exception):
    """A frame could not be encoded or decoded."""

    def __init__(self, message: str, raw: str | bytes | None = None):
        super().__init__(message)
        self.raw = raw


_ENCODERS: dict[CommandType, Callable[[Command], BaseModel]] = {
    CommandType.HOST_GAME: lambda c: HostGame(nickname=c.nickname),
    CommandType.JOIN_GAME: lambda c: JoinGame(
        nickname=c.nickname,
        id=c.game_id,
        player_id=c.player_id,
        player_secret=c.player_secret,
    ),
    CommandType.START_GAME: lambda c: StartGame(),
    CommandType.CHOOSE_CHANCELLOR: lambda c: ChooseChancellor(player=c.target),
    CommandType.VOTE_CHANCELLOR: lambda c: VoteChancellor(vote=c.vote),
    CommandType.PICK_CARD: lambda c: PickCard(color=c.fascist),
    CommandType.VETO_CARD: lambda c: VetoCard(),
    CommandType.PRESIDENTIAL_POWER: lambda c: PresidentialPowerCommand(player=c.target),
    CommandType.SEND_CHAT: lambda c: SendChat(message=c.message),
    CommandType.GET_CHAT_LOG: lambda c: GetChatLog(),
    CommandType.LEAVE: lambda c: Leave(),
}


def encode(command: Command) -> str:
    """
    Encode a command as a JSON text frame.

    Optional fields that are unset (re-auth tokens on a fresh join,
    the target of a policy peek confirmation) are omitted.
    """
    try:
        message = _ENCODERS[command.command_type](command)
    except ValidationError as e:
        raise ProtocolError(
            f"Cannot encode {command.command_type.value}: {e.error_count()} invalid field(s)"
        ) from e
    return message.model_dump_json(exclude_none=True)


def decode(raw: str | bytes) -> InboundEvent:
    """Decode one inbound frame into a typed event."""
    try:
        message = _server_messages.validate_json(raw)
    except ValidationError as e:
        raise ProtocolError(f"Malformed server message: {e.error_count()} error(s)", raw) from e

    if isinstance(message, Alert):
        return AlertReceived(message=message.message)
    if isinstance(message, SetIdentifiers):
        return IdentifiersAssigned(
            game_id=message.game_id,
            player_id=message.player_id,
            secret=message.secret,
        )
    if isinstance(message, GameStateMessage):
        return SnapshotReceived(snapshot=snapshot_from_payload(message.state))
    if isinstance(message, ReceiveChat):
        return ChatReceived(event=chat_from_line(message))
    if isinstance(message, ChatLog):
        return ChatLogReceived(events=tuple(chat_from_line(line) for line in message.log))

    raise ProtocolError(f"Unhandled server message: {type(message).__name__}", raw)


def snapshot_from_payload(payload: SnapshotPayload) -> GameSnapshot:
    """Convert a validated wire snapshot into an immutable GameSnapshot."""
    players = tuple(
        PlayerView(
            player_id=player_id,
            name=data.name,
            vote=data.vote,
            role=data.role,
            dead=data.dead,
        )
        for player_id, data in payload.players.items()
    )
    return GameSnapshot(
        phase_info=PhaseInfo(
            phase=payload.turn_phase.type,
            winner=payload.turn_phase.winner,
            power=payload.turn_phase.power,
        ),
        players=players,
        turn_order=tuple(payload.turn_order),
        host=payload.host,
        president=payload.president,
        chancellor=payload.chancellor,
        last_president=payload.last_president,
        last_chancellor=payload.last_chancellor,
        liberal_policies=payload.liberal_policies,
        fascist_policies=payload.fascist_policies,
        election_tracker=payload.election_tracker,
        votes=payload.votes or 0,
        cards=tuple(payload.cards or ()),
        version=payload.version,
    )


def chat_from_line(line: ChatLine) -> ChatEvent:
    return ChatEvent(message=line.message, sender_id=line.id, name=line.name)
