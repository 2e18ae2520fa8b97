"""
Pydantic Schemas for the wire protocol.

These models define the exact contract between this client and the game
server. Every message is a JSON object tagged by its "type" field.

Outbound (client -> server):
- HostGame, JoinGame, StartGame, ChooseChancellor, VoteChancellor,
  PickCard, VetoCard, PresidentialPower, SendChat, GetChatLog, Leave

Inbound (server -> client):
- Alert, SetIdentifiers, GameState, ReceiveChat, ChatLog

The server spells the fascist color "Facist"; both spellings are accepted
on input.
"""

from typing import Annotated, Literal, Optional, Union
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from ..client_core.state import PolicyColor, PresidentialPower, Role, TurnPhase, SNAPSHOT_VERSION


def _normalize_color(value):
    """Map the server's "Facist" spelling onto the enum value."""
    if isinstance(value, str) and value.lower() == "facist":
        return "Fascist"
    return value


# =============================================================================
# Outbound Commands
# =============================================================================

class HostGame(BaseModel):
    """Create a new game and become its host."""
    type: Literal["HostGame"] = "HostGame"
    nickname: str


class JoinGame(BaseModel):
    """Join by game code, or re-authenticate with a stored identity."""
    type: Literal["JoinGame"] = "JoinGame"
    nickname: str
    id: Optional[str] = None
    player_id: Optional[str] = None
    player_secret: Optional[str] = None


class StartGame(BaseModel):
    type: Literal["StartGame"] = "StartGame"


class ChooseChancellor(BaseModel):
    type: Literal["ChooseChancellor"] = "ChooseChancellor"
    player: str


class VoteChancellor(BaseModel):
    type: Literal["VoteChancellor"] = "VoteChancellor"
    vote: bool


class PickCard(BaseModel):
    """`color` is True for the fascist card, False for the liberal one."""
    type: Literal["PickCard"] = "PickCard"
    color: bool


class VetoCard(BaseModel):
    type: Literal["VetoCard"] = "VetoCard"


class PresidentialPowerCommand(BaseModel):
    """Target omitted to confirm a policy peek."""
    type: Literal["PresidentialPower"] = "PresidentialPower"
    player: Optional[str] = None


class SendChat(BaseModel):
    type: Literal["SendChat"] = "SendChat"
    message: str


class GetChatLog(BaseModel):
    type: Literal["GetChatLog"] = "GetChatLog"


class Leave(BaseModel):
    type: Literal["Leave"] = "Leave"


ClientMessage = Annotated[
    Union[
        HostGame,
        JoinGame,
        StartGame,
        ChooseChancellor,
        VoteChancellor,
        PickCard,
        VetoCard,
        PresidentialPowerCommand,
        SendChat,
        GetChatLog,
        Leave,
    ],
    Field(discriminator="type"),
]


# =============================================================================
# Snapshot Models
# =============================================================================

class PlayerPayload(BaseModel):
    """One roster entry. Role is null when unknown to this player."""
    name: str
    vote: Optional[bool] = None
    role: Optional[Role] = None
    dead: bool = False

    @field_validator("role", mode="before")
    @classmethod
    def _role_spelling(cls, value):
        return _normalize_color(value)


class TurnPhasePayload(BaseModel):
    """Tagged turn phase; winner only when Ended, power only when PresidentialPower."""
    type: TurnPhase
    winner: Optional[PolicyColor] = None
    power: Optional[PresidentialPower] = None

    @field_validator("winner", mode="before")
    @classmethod
    def _winner_spelling(cls, value):
        return _normalize_color(value)


class SnapshotPayload(BaseModel):
    """
    Full game state as pushed by the server.

    Everything except the phase is optional and defaults to an empty
    roster, zero counters and no office holders.
    """
    version: int = SNAPSHOT_VERSION
    turn_phase: TurnPhasePayload
    players: dict[str, PlayerPayload] = Field(default_factory=dict)
    turn_order: list[str] = Field(default_factory=list)

    host: Optional[str] = None
    president: Optional[str] = None
    chancellor: Optional[str] = None
    last_president: Optional[str] = None
    last_chancellor: Optional[str] = None

    liberal_policies: int = Field(0, ge=0)
    fascist_policies: int = Field(
        0, ge=0, validation_alias=AliasChoices("fascist_policies", "facist_policies")
    )
    election_tracker: int = Field(0, ge=0)
    votes: Optional[int] = Field(None, ge=0)

    cards: Optional[list[PolicyColor]] = None

    @field_validator("cards", mode="before")
    @classmethod
    def _cards_spelling(cls, value):
        if isinstance(value, list):
            return [_normalize_color(v) for v in value]
        return value

    @model_validator(mode="after")
    def _turn_order_matches_phase(self):
        started = self.turn_phase.type not in (TurnPhase.INTRO, TurnPhase.LOBBY)
        if started != bool(self.turn_order):
            raise ValueError(
                f"turn_order must be non-empty exactly when the game has started "
                f"(phase={self.turn_phase.type.value}, turn_order={len(self.turn_order)})"
            )
        return self


class ChatLine(BaseModel):
    """A chat line; id is absent for system lines."""
    id: Optional[str] = None
    message: str
    name: Optional[str] = None


# =============================================================================
# Inbound Events
# =============================================================================

class Alert(BaseModel):
    type: Literal["Alert"] = "Alert"
    message: str


class SetIdentifiers(BaseModel):
    """Identity assignment after a fresh host or join."""
    type: Literal["SetIdentifiers"] = "SetIdentifiers"
    game_id: str
    player_id: str
    secret: str = Field(validation_alias=AliasChoices("secret", "player_secret"))


class GameStateMessage(BaseModel):
    type: Literal["GameState"] = "GameState"
    state: SnapshotPayload


class ReceiveChat(ChatLine):
    type: Literal["ReceiveChat"] = "ReceiveChat"


class ChatLog(BaseModel):
    type: Literal["ChatLog"] = "ChatLog"
    log: list[ChatLine] = Field(default_factory=list)


ServerMessage = Annotated[
    Union[Alert, SetIdentifiers, GameStateMessage, ReceiveChat, ChatLog],
    Field(discriminator="type"),
]
