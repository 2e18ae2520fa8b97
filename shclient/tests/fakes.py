"""
Test doubles and builders.

- FakeScheduler: timers that only fire when a test says so
- FakeConnector: records outbound frames; tests inject transport events
- Builders for wire payloads and GameSnapshot values
"""

from __future__ import annotations
import json
from typing import Any, Callable

from ..client_core.state import (
    GameSnapshot,
    PhaseInfo,
    PlayerView,
    PolicyColor,
    PresidentialPower,
    TurnPhase,
)
from ..transport.channel import ChannelEvent, Connector, TransportChannel


PLAYER_IDS = ["p1", "p2", "p3", "p4", "p5"]
PLAYER_NAMES = {"p1": "anna", "p2": "bob", "p3": "joe", "p4": "john", "p5": "jack"}


# =============================================================================
# Transport fakes
# =============================================================================

class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], Any]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not self.cancelled and not self.fired


class FakeScheduler:
    """Collects call_later() requests; fire_next() runs the oldest pending one."""

    def __init__(self):
        self.timers: list[FakeTimer] = []

    def call_later(self, delay: float, callback: Callable[[], Any]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if t.pending]

    def fire_next(self):
        timer = self.pending[0]
        timer.fired = True
        timer.callback()


class FakeConnector(Connector):
    """Connector that never touches the network."""

    def __init__(self):
        self.channel: TransportChannel | None = None
        self.connect_calls = 0
        self.closed = False
        self.sent: list[str] = []

    def connect(self, channel: TransportChannel):
        self.channel = channel
        self.connect_calls += 1

    def send(self, data: str):
        self.sent.append(data)

    def close(self):
        self.closed = True

    # Event injection

    def open(self):
        self.channel.dispatch(ChannelEvent.opened())

    def drop(self):
        self.channel.dispatch(ChannelEvent.closed())

    def receive(self, payload: dict | str | bytes):
        data = json.dumps(payload) if isinstance(payload, dict) else payload
        self.channel.dispatch(ChannelEvent.message(data))

    @property
    def sent_messages(self) -> list[dict]:
        return [json.loads(frame) for frame in self.sent]

    def clear(self):
        self.sent.clear()


# =============================================================================
# Wire payload builders
# =============================================================================

def snapshot_payload(
    phase: str = "Lobby",
    player_ids: list[str] | None = None,
    started: bool | None = None,
    **fields,
) -> dict:
    """A wire snapshot with the default five-player roster."""
    player_ids = PLAYER_IDS if player_ids is None else player_ids
    if started is None:
        started = phase not in ("Lobby", "Intro")
    payload = {
        "turn_phase": {"type": phase},
        "players": {
            pid: {"name": PLAYER_NAMES.get(pid, pid), "vote": None, "role": None, "dead": False}
            for pid in player_ids
        },
        "turn_order": list(player_ids) if started else [],
        "host": player_ids[0] if player_ids else None,
        "liberal_policies": 0,
        "facist_policies": 0,
    }
    for key in ("winner", "power"):
        if key in fields:
            payload["turn_phase"][key] = fields.pop(key)
    payload.update(fields)
    return payload


def game_state_message(phase: str = "Lobby", **kwargs) -> dict:
    return {"type": "GameState", "state": snapshot_payload(phase, **kwargs)}


def set_identifiers_message(game_id: str = "G1", player_id: str = "P7", secret: str = "S9") -> dict:
    return {"type": "SetIdentifiers", "game_id": game_id, "player_id": player_id, "secret": secret}


def alert_message(message: str) -> dict:
    return {"type": "Alert", "message": message}


def chat_message(message: str, sender: str | None = None) -> dict:
    payload = {"type": "ReceiveChat", "message": message}
    if sender is not None:
        payload["id"] = sender
    return payload


def chat_log_message(lines: list[tuple[str | None, str]]) -> dict:
    log = []
    for sender, message in lines:
        line = {"message": message}
        if sender is not None:
            line["id"] = sender
        log.append(line)
    return {"type": "ChatLog", "log": log}


# =============================================================================
# Snapshot builders
# =============================================================================

def make_snapshot(
    phase: TurnPhase = TurnPhase.LOBBY,
    player_ids: list[str] | None = None,
    dead: set[str] | None = None,
    power: PresidentialPower | None = None,
    winner: PolicyColor | None = None,
    **fields,
) -> GameSnapshot:
    """A GameSnapshot with the default five-player roster."""
    player_ids = PLAYER_IDS if player_ids is None else player_ids
    dead = dead or set()
    started = phase not in (TurnPhase.INTRO, TurnPhase.LOBBY)
    fields.setdefault("host", player_ids[0] if player_ids else None)
    return GameSnapshot(
        phase_info=PhaseInfo(phase=phase, winner=winner, power=power),
        players=tuple(
            PlayerView(player_id=pid, name=PLAYER_NAMES.get(pid, pid), dead=pid in dead)
            for pid in player_ids
        ),
        turn_order=tuple(player_ids) if started else (),
        **fields,
    )
