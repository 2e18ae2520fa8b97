"""
Game State - Client-side view of the authoritative game snapshot.

Design principles:
- Immutable: every snapshot is a frozen value, replaced wholesale
- Server-owned: the client never edits a snapshot it did not receive verbatim
- Explicit defaults: fields missing on the wire become zero counters,
  empty rosters and None ids rather than implicit absence
- Versioned: snapshots carry the wire schema version they were decoded from
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


SNAPSHOT_VERSION = 1

# Fascist policies enacted before the veto power unlocks
VETO_UNLOCK_THRESHOLD = 4


class TurnPhase(Enum):
    """Server-driven stage of a round."""
    INTRO = "Intro"  # Client-only placeholder before any game is joined
    LOBBY = "Lobby"
    ELECTING = "Electing"
    VOTING = "Voting"
    PRESIDENT_SELECT = "PresidentSelect"
    CHANCELLOR_SELECT = "ChancellorSelect"
    POWER = "PresidentialPower"
    ENDED = "Ended"


class PolicyColor(Enum):
    """Policy card colors."""
    LIBERAL = "Liberal"
    FASCIST = "Fascist"


class Role(Enum):
    """Secret roles. Unknown roles are represented as None on PlayerView."""
    LIBERAL = "Liberal"
    FASCIST = "Fascist"
    HITLER = "Hitler"


class PresidentialPower(Enum):
    """Executive actions granted to the president."""
    POLICY_PEEK = "PolicyPeek"
    INVESTIGATE = "InvestigateLoyalty"
    SPECIAL_ELECTION = "CallSpecialElection"
    EXECUTION = "Execution"

    @property
    def targets_player(self) -> bool:
        """Every power except policy peek needs a target player."""
        return self is not PresidentialPower.POLICY_PEEK


@dataclass(frozen=True)
class PhaseInfo:
    """
    Tagged turn phase.

    `winner` is only set for ENDED, `power` only for POWER.
    """
    phase: TurnPhase = TurnPhase.INTRO
    winner: PolicyColor | None = None
    power: PresidentialPower | None = None


@dataclass(frozen=True)
class PlayerView:
    """One roster entry as seen by this client."""
    player_id: str
    name: str
    vote: bool | None = None
    role: Role | None = None
    dead: bool = False

    @property
    def alive(self) -> bool:
        return not self.dead

    @property
    def has_voted(self) -> bool:
        return self.vote is not None


@dataclass(frozen=True)
class GameSnapshot:
    """
    Complete authoritative game state at a point in time.

    Pushed by the server and replaced wholesale on every GameState event.
    `turn_order` is empty before the game starts (Intro and Lobby).
    `cards` holds the pending policy options during card selection and
    the peeked cards during a policy peek.
    """
    phase_info: PhaseInfo = field(default_factory=PhaseInfo)
    players: tuple[PlayerView, ...] = ()
    turn_order: tuple[str, ...] = ()

    host: str | None = None
    president: str | None = None
    chancellor: str | None = None
    last_president: str | None = None
    last_chancellor: str | None = None

    liberal_policies: int = 0
    fascist_policies: int = 0
    election_tracker: int = 0
    votes: int = 0

    cards: tuple[PolicyColor, ...] = ()

    version: int = SNAPSHOT_VERSION

    @classmethod
    def placeholder(cls) -> GameSnapshot:
        """The Intro snapshot shown before any server state arrives."""
        return cls()

    @property
    def phase(self) -> TurnPhase:
        return self.phase_info.phase

    @property
    def winner(self) -> PolicyColor | None:
        return self.phase_info.winner

    @property
    def power(self) -> PresidentialPower | None:
        return self.phase_info.power

    @property
    def is_terminal(self) -> bool:
        return self.phase == TurnPhase.ENDED

    @property
    def has_started(self) -> bool:
        return self.phase not in (TurnPhase.INTRO, TurnPhase.LOBBY)

    @property
    def veto_unlocked(self) -> bool:
        return self.fascist_policies >= VETO_UNLOCK_THRESHOLD

    def get_player(self, player_id: str | None) -> PlayerView | None:
        """Get a roster entry by ID."""
        if player_id is None:
            return None
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def is_alive(self, player_id: str | None) -> bool:
        player = self.get_player(player_id)
        return player is not None and player.alive

    def ordered_players(self) -> list[PlayerView]:
        """
        Players in turn order once the game has started,
        otherwise in roster order (the lobby has no turn order yet).
        """
        if not self.turn_order:
            return list(self.players)
        result = []
        for player_id in self.turn_order:
            player = self.get_player(player_id)
            if player:
                result.append(player)
        return result


@dataclass(frozen=True)
class ChatEvent:
    """
    A single chat line.

    A missing sender_id marks a system-generated line.
    `name` is the sender's display name when the server provides one.
    """
    message: str
    sender_id: str | None = None
    name: str | None = None

    @property
    def is_system(self) -> bool:
        return self.sender_id is None
