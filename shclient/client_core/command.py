"""
Command System - Outbound player commands.

Commands represent:
1. Session commands (host, join, re-authenticate, leave)
2. Game commands (start, nominate, vote, pick card, veto, power)
3. Chat commands (send a line, request the full log)

Commands are built by the Action Gate (game and chat commands) or the
Session Controller (session commands) and encoded by the protocol codec.
Presentation code never builds wire messages directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .state import PolicyColor


class CommandType(Enum):
    """Outbound command tags, valued by their wire names."""
    # Session
    HOST_GAME = "HostGame"
    JOIN_GAME = "JoinGame"
    LEAVE = "Leave"

    # Game
    START_GAME = "StartGame"
    CHOOSE_CHANCELLOR = "ChooseChancellor"
    VOTE_CHANCELLOR = "VoteChancellor"
    PICK_CARD = "PickCard"
    VETO_CARD = "VetoCard"
    PRESIDENTIAL_POWER = "PresidentialPower"

    # Chat
    SEND_CHAT = "SendChat"
    GET_CHAT_LOG = "GetChatLog"


@dataclass(frozen=True)
class Command:
    """
    A complete command ready to be encoded.

    Different command types use different fields.
    Unused fields stay None and are omitted on the wire.
    """
    command_type: CommandType

    nickname: str | None = None
    game_id: str | None = None

    # Only set when re-authenticating
    player_id: str | None = None
    player_secret: str | None = None

    target: str | None = None
    vote: bool | None = None
    fascist: bool | None = None  # PickCard: True selects the fascist card
    message: str | None = None

    @property
    def is_reauthentication(self) -> bool:
        return (
            self.command_type == CommandType.JOIN_GAME
            and self.player_id is not None
            and self.player_secret is not None
        )

    @classmethod
    def host_game(cls, nickname: str) -> Command:
        """Factory for hosting a new game."""
        return cls(command_type=CommandType.HOST_GAME, nickname=nickname)

    @classmethod
    def join_game(cls, nickname: str, game_id: str) -> Command:
        """Factory for a fresh join by game code."""
        return cls(command_type=CommandType.JOIN_GAME, nickname=nickname, game_id=game_id)

    @classmethod
    def rejoin(
        cls,
        nickname: str,
        game_id: str | None,
        player_id: str,
        player_secret: str,
    ) -> Command:
        """Factory for re-authentication with a previously issued identity."""
        return cls(
            command_type=CommandType.JOIN_GAME,
            nickname=nickname,
            game_id=game_id,
            player_id=player_id,
            player_secret=player_secret,
        )

    @classmethod
    def start_game(cls) -> Command:
        return cls(command_type=CommandType.START_GAME)

    @classmethod
    def choose_chancellor(cls, target: str) -> Command:
        return cls(command_type=CommandType.CHOOSE_CHANCELLOR, target=target)

    @classmethod
    def vote_chancellor(cls, vote: bool) -> Command:
        return cls(command_type=CommandType.VOTE_CHANCELLOR, vote=vote)

    @classmethod
    def pick_card(cls, color: PolicyColor) -> Command:
        """Factory for discarding (president) or enacting (chancellor) a card."""
        return cls(
            command_type=CommandType.PICK_CARD,
            fascist=color == PolicyColor.FASCIST,
        )

    @classmethod
    def veto_card(cls) -> Command:
        return cls(command_type=CommandType.VETO_CARD)

    @classmethod
    def presidential_power(cls, target: str | None = None) -> Command:
        """Factory for a power; no target confirms a policy peek."""
        return cls(command_type=CommandType.PRESIDENTIAL_POWER, target=target)

    @classmethod
    def send_chat(cls, message: str) -> Command:
        return cls(command_type=CommandType.SEND_CHAT, message=message)

    @classmethod
    def get_chat_log(cls) -> Command:
        return cls(command_type=CommandType.GET_CHAT_LOG)

    @classmethod
    def leave(cls) -> Command:
        return cls(command_type=CommandType.LEAVE)
