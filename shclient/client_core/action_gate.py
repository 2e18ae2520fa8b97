"""
Action Gate - Validates player intents and builds the matching commands.

The action gate is used by:
1. The session, to turn user intents into commands
2. Presentation code, to decide which affordances to offer
3. Tests, to check eligibility rules without a connection

Every check here is a UX guard, not a security boundary: the server
re-validates everything. A failed check returns None and nothing is sent.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass

from .command import Command, CommandType
from .state import PolicyColor, TurnPhase
from .store import GameStateStore

logger = logging.getLogger(__name__)


@dataclass
class ActionGate:
    """
    Builds commands for the player identified by `player_id`.

    Stateless and re-entrant: all inputs are read from the store and the
    flags passed in at construction.
    """
    store: GameStateStore
    player_id: str | None
    connected: bool = True
    authenticated: bool = True

    def start_game(self) -> Command | None:
        """Only the host may start, and only from the lobby."""
        if not self._ready():
            return None
        if not self.store.is_in_lobby():
            return self._reject("start_game", "not in lobby")
        if not self.store.is_host(self.player_id):
            return self._reject("start_game", "not the host")
        return Command.start_game()

    def nominate(self, target: str) -> Command | None:
        """Nominate a chancellor while electing."""
        if not self._ready():
            return None
        snapshot = self.store.snapshot
        if snapshot.phase != TurnPhase.ELECTING:
            return self._reject("nominate", "not electing")
        if snapshot.president != self.player_id:
            return self._reject("nominate", "not the president")
        if target not in self.store.nomination_candidates(self.player_id):
            return self._reject("nominate", f"{target} is not eligible")
        return Command.choose_chancellor(target)

    def vote(self, vote: bool) -> Command | None:
        """Vote on the proposed government. Repeat votes are not locked out."""
        if not self._ready():
            return None
        if self.store.phase != TurnPhase.VOTING:
            return self._reject("vote", "not voting")
        if not self.store.is_alive(self.player_id):
            return self._reject("vote", "dead players cannot vote")
        return Command.vote_chancellor(vote)

    def pick_card(self, color: PolicyColor) -> Command | None:
        """
        Discard (president, from three) or enact (chancellor, from two).

        The card must be one of the offered options.
        """
        if not self._ready():
            return None
        snapshot = self.store.snapshot
        if snapshot.phase == TurnPhase.PRESIDENT_SELECT:
            holder = snapshot.president
        elif snapshot.phase == TurnPhase.CHANCELLOR_SELECT:
            holder = snapshot.chancellor
        else:
            return self._reject("pick_card", "not selecting cards")

        if holder != self.player_id:
            return self._reject("pick_card", "not the card holder")
        if color not in snapshot.cards:
            return self._reject("pick_card", f"{color.value} was not offered")
        return Command.pick_card(color)

    def veto(self) -> Command | None:
        """
        Request or agree to a veto during chancellor selection.

        Gated on phase and the fascist policy counter, and additionally on
        the caller being president or chancellor, since nobody else can
        take part in a veto. The other party's agreement is not observable
        here and is left to the server.
        """
        if not self._ready():
            return None
        snapshot = self.store.snapshot
        if snapshot.phase != TurnPhase.CHANCELLOR_SELECT:
            return self._reject("veto", "not in chancellor selection")
        if not snapshot.veto_unlocked:
            return self._reject("veto", "veto not unlocked")
        if self.player_id not in (snapshot.president, snapshot.chancellor):
            return self._reject("veto", "not in government")
        return Command.veto_card()

    def use_power(self, target: str | None = None) -> Command | None:
        """
        Exercise the current presidential power.

        Policy peek takes no target and is a plain confirmation.
        Every other power needs a living player in turn order
        other than the president.
        """
        if not self._ready():
            return None
        snapshot = self.store.snapshot
        if snapshot.phase != TurnPhase.POWER or snapshot.power is None:
            return self._reject("use_power", "no power to exercise")
        if snapshot.president != self.player_id:
            return self._reject("use_power", "not the president")

        if not snapshot.power.targets_player:
            return Command.presidential_power()

        if target is None:
            return self._reject("use_power", "power needs a target")
        if target == self.player_id:
            return self._reject("use_power", "cannot target self")
        if target not in snapshot.turn_order or not snapshot.is_alive(target):
            return self._reject("use_power", f"{target} is not a valid target")
        return Command.presidential_power(target)

    def send_chat(self, message: str) -> Command | None:
        """Chat is open in every phase once authenticated."""
        if not self._ready():
            return None
        if not message or not message.strip():
            return self._reject("send_chat", "blank line")
        return Command.send_chat(message)

    def available(self) -> list[CommandType]:
        """
        Command types the player can issue right now.

        Used by presentation code to decide which affordances to show.
        Per-target checks (who to nominate, which card) still go through
        the individual methods.
        """
        if not self.connected or not self.authenticated:
            return []

        snapshot = self.store.snapshot
        available = [CommandType.SEND_CHAT]

        if self.start_game() is not None:
            available.append(CommandType.START_GAME)
        if snapshot.phase == TurnPhase.ELECTING and self.nomination_options():
            available.append(CommandType.CHOOSE_CHANCELLOR)
        if self.vote(True) is not None:
            available.append(CommandType.VOTE_CHANCELLOR)
        if any(self.pick_card(c) is not None for c in set(snapshot.cards)):
            available.append(CommandType.PICK_CARD)
        if self.veto() is not None:
            available.append(CommandType.VETO_CARD)
        if self.power_targets() or (
            snapshot.power is not None and self.use_power() is not None
        ):
            available.append(CommandType.PRESIDENTIAL_POWER)

        return available

    def nomination_options(self) -> list[str]:
        """Targets nominate() would accept."""
        candidates = self.store.nomination_candidates(self.player_id)
        return [t for t in candidates if self.nominate(t) is not None]

    def power_targets(self) -> list[str]:
        """Targets use_power() would accept for a player-targeting power."""
        snapshot = self.store.snapshot
        if snapshot.power is None or not snapshot.power.targets_player:
            return []
        return [t for t in snapshot.turn_order if self.use_power(t) is not None]

    def _ready(self) -> bool:
        if not self.connected:
            logger.debug("Gate closed: channel not open")
            return False
        if not self.authenticated:
            logger.debug("Gate closed: not authenticated")
            return False
        return True

    def _reject(self, intent: str, reason: str) -> None:
        logger.debug("Rejected %s: %s", intent, reason)
        return None
