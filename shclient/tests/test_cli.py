"""
Tests for configuration and the command-line interface.
"""

from pathlib import Path

import pytest

from .. import cli
from ..cli import main, render_state, run_command
from ..config import DEFAULT_SERVER_URL, ClientConfig
from ..identity import IdentityStore, JsonFileBackend, SessionIdentity
from .fakes import game_state_message, set_identifiers_message


class TestClientConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self):
        config = ClientConfig.from_env({})

        assert config.server_url == DEFAULT_SERVER_URL
        assert config.reconnect_delay == 0.1
        assert config.log_level == "WARNING"
        assert config.identity_path.name == "identity.json"

    def test_from_env(self):
        config = ClientConfig.from_env({
            "SHCLIENT_SERVER_URL": "ws://example.test/ws/",
            "SHCLIENT_IDENTITY_PATH": "/tmp/seat.json",
            "SHCLIENT_RECONNECT_DELAY": "0.5",
            "SHCLIENT_LOG_LEVEL": "DEBUG",
        })

        assert config.server_url == "ws://example.test/ws/"
        assert config.identity_path == Path("/tmp/seat.json")
        assert config.reconnect_delay == 0.5
        assert config.log_level == "DEBUG"

    def test_bad_delay(self):
        with pytest.raises(ValueError):
            ClientConfig.from_env({"SHCLIENT_RECONNECT_DELAY": "soon"})

        with pytest.raises(ValueError):
            ClientConfig(reconnect_delay=-1)

    def test_overrides_skip_none(self):
        config = ClientConfig.from_env({}).with_overrides(server_url=None, log_level="INFO")

        assert config.server_url == DEFAULT_SERVER_URL
        assert config.log_level == "INFO"


class TestIdentityCommands:
    """Tests for the identity and forget subcommands."""

    @pytest.fixture(autouse=True)
    def no_log_handlers(self, monkeypatch):
        monkeypatch.setattr(cli, "configure_logging", lambda level: None)

    def test_identity_hides_secret(self, tmp_path, capsys):
        path = tmp_path / "identity.json"
        IdentityStore(JsonFileBackend(path)).save(SessionIdentity("-2", "bob", "G1", "P2", "S2"))

        main(["--identity-path", str(path), "identity", "--seat", "-2"])

        out = capsys.readouterr().out
        assert "bob" in out
        assert "P2" in out
        assert "S2" not in out
        assert "(stored)" in out

    def test_forget(self, tmp_path, capsys):
        path = tmp_path / "identity.json"
        IdentityStore(JsonFileBackend(path)).save(SessionIdentity("", "anna", "G1", "P7", "S9"))

        main(["--identity-path", str(path), "forget"])

        assert IdentityStore(JsonFileBackend(path)).load("") == SessionIdentity()

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit):
            main([])


class TestPlayCommands:
    """Tests for the interactive command parser."""

    def test_quit(self, session):
        assert run_command(session, "quit") is False
        assert run_command(session, "") is True

    def test_host(self, session, wire):
        wire.open()

        run_command(session, "host anna")

        assert wire.sent_messages == [{"type": "HostGame", "nickname": "anna"}]

    def test_vote(self, session, wire):
        wire.open()
        session.host("anna")
        wire.receive(set_identifiers_message("G1", "p3", "S3"))
        wire.receive(game_state_message("Voting", president="p1", chancellor="p2"))
        wire.clear()

        run_command(session, "vote ja")

        assert wire.sent_messages == [{"type": "VoteChancellor", "vote": True}]

    def test_unknown_command(self, session, capsys):
        run_command(session, "dance")

        assert "Unknown command" in capsys.readouterr().out

    def test_render_state(self, session, wire):
        wire.open()
        session.host("anna")
        wire.receive(set_identifiers_message("G1", "p1", "S1"))
        wire.receive(game_state_message("Electing", president="p1", facist_policies=2))

        text = render_state(session)

        assert "Phase: Electing" in text
        assert "fascist 2" in text
        assert "p1  anna (you, president)" in text
        assert "Your move." in text
