"""
Tests for the game state store.

Tests:
- Wholesale snapshot replacement
- Chat append and replay semantics
- Derived queries used by presentation code
"""

import pytest

from ..client_core.state import ChatEvent, GameSnapshot, TurnPhase
from .fakes import make_snapshot


class TestSnapshots:
    """Tests for snapshot application."""

    def test_starts_with_intro_placeholder(self, store):
        """A fresh store shows the Intro placeholder."""
        assert store.snapshot == GameSnapshot.placeholder()
        assert store.phase == TurnPhase.INTRO
        assert store.snapshot.players == ()
        assert store.snapshot.turn_order == ()

    def test_latest_snapshot_wins(self, store):
        """After any sequence of snapshots the store holds exactly the last one."""
        first = make_snapshot(TurnPhase.ELECTING, president="p1", liberal_policies=2)
        second = make_snapshot(TurnPhase.VOTING, president="p1", chancellor="p3")
        third = make_snapshot(TurnPhase.LOBBY, player_ids=["p1", "p2"])

        for snapshot in (first, second, third):
            store.apply_snapshot(snapshot)
            assert store.snapshot is snapshot

        # Nothing from earlier snapshots survives
        assert store.snapshot.liberal_policies == 0
        assert store.snapshot.chancellor is None
        assert len(store.snapshot.players) == 2

    def test_snapshots_are_immutable(self, store):
        """Snapshots cannot be edited in place."""
        store.apply_snapshot(make_snapshot(TurnPhase.ELECTING, president="p1"))
        with pytest.raises(AttributeError):
            store.snapshot.president = "p2"

    def test_reset_returns_to_placeholder(self, store):
        """Reset drops snapshot and chat."""
        store.apply_snapshot(make_snapshot(TurnPhase.ELECTING, president="p1"))
        store.append_chat(ChatEvent(message="hi", sender_id="p1"))

        store.reset()

        assert store.phase == TurnPhase.INTRO
        assert store.chat_log == ()


class TestChatLog:
    """Tests for the chat log."""

    def test_append_keeps_arrival_order(self, store):
        """Lines appear in the order they arrived, system lines included."""
        store.append_chat(ChatEvent(message="one", sender_id="p1"))
        store.append_chat(ChatEvent(message="The game has started."))
        store.append_chat(ChatEvent(message="one", sender_id="p1"))

        messages = [e.message for e in store.chat_log]
        assert messages == ["one", "The game has started.", "one"]
        assert store.chat_log[1].is_system

    def test_replay_replaces_log(self, store):
        """A replay replaces whatever was there."""
        store.append_chat(ChatEvent(message="stale", sender_id="p2"))
        replay = [ChatEvent(message="a", sender_id="p1"), ChatEvent(message="b")]

        store.replace_chat_log(replay)

        assert list(store.chat_log) == replay

    def test_replay_is_idempotent(self, store):
        """Applying the same replay twice gives the same log."""
        replay = [ChatEvent(message="a", sender_id="p1"), ChatEvent(message="b", sender_id="p2")]

        store.replace_chat_log(replay)
        store.replace_chat_log(replay)

        assert list(store.chat_log) == replay

    def test_chat_log_is_read_only(self, store):
        """The exposed log is a tuple copy."""
        store.append_chat(ChatEvent(message="a"))
        log = store.chat_log
        assert isinstance(log, tuple)


class TestDerivedQueries:
    """Tests for the queries presentation code relies on."""

    def test_is_in_lobby(self, store):
        store.apply_snapshot(make_snapshot(TurnPhase.LOBBY))
        assert store.is_in_lobby()

        store.apply_snapshot(make_snapshot(TurnPhase.ELECTING, president="p1"))
        assert not store.is_in_lobby()

    def test_nomination_candidates_exclude_previous_government(self, store):
        """President, last president and last chancellor cannot be nominated."""
        store.apply_snapshot(make_snapshot(
            TurnPhase.ELECTING,
            president="p1",
            last_president="p2",
            last_chancellor="p3",
        ))

        assert store.nomination_candidates("p1") == ["p4", "p5"]

    def test_nomination_candidates_skip_dead_players(self, store):
        store.apply_snapshot(make_snapshot(TurnPhase.ELECTING, president="p1", dead={"p4"}))

        assert store.nomination_candidates("p1") == ["p2", "p3", "p5"]

    def test_remaining_voters(self, store):
        """Turn order size minus votes cast."""
        store.apply_snapshot(make_snapshot(TurnPhase.VOTING, president="p1", chancellor="p2", votes=2))

        assert store.remaining_voters() == 3

    def test_remaining_voters_before_any_vote(self, store):
        store.apply_snapshot(make_snapshot(TurnPhase.VOTING, president="p1", chancellor="p2"))

        assert store.remaining_voters() == 5

    @pytest.mark.parametrize("phase,expected", [
        (TurnPhase.ELECTING, {"p1"}),
        (TurnPhase.VOTING, {"p1", "p2", "p3", "p4", "p5"}),
        (TurnPhase.PRESIDENT_SELECT, {"p1"}),
        (TurnPhase.CHANCELLOR_SELECT, {"p2"}),
        (TurnPhase.POWER, {"p1"}),
        (TurnPhase.LOBBY, set()),
    ])
    def test_is_my_turn(self, store, phase, expected):
        """Whose move it is depends on the phase and office."""
        store.apply_snapshot(make_snapshot(phase, president="p1", chancellor="p2"))

        acting = {pid for pid in ["p1", "p2", "p3", "p4", "p5"] if store.is_my_turn(pid)}
        assert acting == expected

    def test_dead_players_do_not_vote(self, store):
        store.apply_snapshot(make_snapshot(TurnPhase.VOTING, president="p1", dead={"p5"}))

        assert not store.is_my_turn("p5")
        assert not store.is_alive("p5")
        assert store.is_alive("p4")


class TestListeners:
    """Tests for change notification."""

    def test_listener_called_on_every_change(self, store):
        calls = []
        store.subscribe(lambda s: calls.append(s.revision))

        store.apply_snapshot(make_snapshot())
        store.append_chat(ChatEvent(message="x"))
        store.replace_chat_log([])

        assert calls == [1, 2, 3]

    def test_unsubscribe(self, store):
        calls = []
        unsubscribe = store.subscribe(lambda s: calls.append(1))
        unsubscribe()

        store.apply_snapshot(make_snapshot())

        assert calls == []
        assert store.revision == 1
