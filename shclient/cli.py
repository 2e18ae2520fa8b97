"""
shclient CLI - Command-line interface for the client.

Usage:
    shclient play [--url URL] [--seat SUFFIX]     Play from the terminal
    shclient identity [--seat SUFFIX]             Show the stored identity
    shclient forget [--seat SUFFIX]               Clear the stored identity

Inside `play`, type `help` for the list of commands.
"""

from __future__ import annotations
import argparse
import asyncio
import sys

from .client_core.state import PolicyColor, TurnPhase
from .config import ClientConfig
from .identity import IdentityStore, JsonFileBackend
from .logging_setup import configure_logging
from .session import Session, SessionManager
from .transport.websocket import WebSocketConnector

PLAY_HELP = """Commands:
  host NAME            host a new game
  join NAME CODE       join a game by code
  start                start the game (host only)
  nominate ID          nominate a chancellor
  vote yes|no          vote on the government
  pick liberal|fascist choose a policy card
  veto                 request or agree to a veto
  power [ID]           use the presidential power (no ID confirms a peek)
  say TEXT             send a chat line
  leave                leave the game
  dismiss              dismiss the current alert
  state                show the game state
  quit                 exit"""


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="shclient - Secret Hitler client",
        prog="shclient",
    )
    parser.add_argument("--identity-path", help="Identity file (default ~/.shclient/identity.json)")
    parser.add_argument("--log-level", help="Log level (default WARNING)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play from the terminal")
    play_parser.add_argument("--url", help="Server websocket URL")
    play_parser.add_argument("--seat", default="", help="Seat suffix")
    play_parser.add_argument("--reconnect-delay", type=float, help="Seconds between reconnects")

    # Identity commands
    identity_parser = subparsers.add_parser("identity", help="Show the stored identity")
    identity_parser.add_argument("--seat", default="", help="Seat suffix")

    forget_parser = subparsers.add_parser("forget", help="Clear the stored identity")
    forget_parser.add_argument("--seat", default="", help="Seat suffix")

    args = parser.parse_args(argv)

    try:
        config = ClientConfig.from_env().with_overrides(
            identity_path=args.identity_path,
            log_level=args.log_level,
            server_url=getattr(args, "url", None),
            reconnect_delay=getattr(args, "reconnect_delay", None),
        )
        configure_logging(config.log_level)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)

    if args.command == "play":
        cmd_play(args, config)
    elif args.command == "identity":
        cmd_identity(args, config)
    elif args.command == "forget":
        cmd_forget(args, config)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_identity(args, config: ClientConfig):
    """Print a seat's stored identity. The secret is never printed."""
    identity = IdentityStore(JsonFileBackend(config.identity_path)).load(args.seat)
    print(f"Seat:     {args.seat!r}")
    print(f"Nickname: {identity.nickname or '-'}")
    print(f"Game:     {identity.game_id or '-'}")
    print(f"Player:   {identity.player_id or '-'}")
    print(f"Secret:   {'(stored)' if identity.player_secret else '-'}")


def cmd_forget(args, config: ClientConfig):
    """Clear a seat's stored identity."""
    IdentityStore(JsonFileBackend(config.identity_path)).clear(args.seat)
    print(f"Cleared identity for seat {args.seat!r}")


def cmd_play(args, config: ClientConfig):
    """Run an interactive session until `quit` or end of input."""
    try:
        asyncio.run(_play(args.seat, config))
    except KeyboardInterrupt:
        pass


async def _play(seat: str, config: ClientConfig):
    loop = asyncio.get_running_loop()
    manager = SessionManager(
        identity_store=IdentityStore(JsonFileBackend(config.identity_path)),
        connector_factory=lambda: WebSocketConnector(config.server_url),
        scheduler=loop,
        reconnect_delay=config.reconnect_delay,
    )
    session = manager.create_session(seat)
    session.store.subscribe(_ChatPrinter())
    print(f"Connecting to {config.server_url} ... (type 'help' for commands)")

    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            if not run_command(session, line.strip()):
                break
            if session.alert:
                print(f"! {session.alert}")
    finally:
        manager.close_all()


class _ChatPrinter:
    """Prints chat lines as they arrive."""

    def __init__(self):
        self.seen = 0

    def __call__(self, store):
        log = store.chat_log
        if len(log) < self.seen:
            # Replayed or reset log
            self.seen = 0
        for event in log[self.seen:]:
            sender = event.name or event.sender_id or "*"
            print(f"[{sender}] {event.message}")
        self.seen = len(log)


def run_command(session: Session, line: str) -> bool:
    """
    Run one terminal command against a session.

    Returns False when the user asked to quit.
    """
    if not line:
        return True
    verb, _, rest = line.partition(" ")
    verb = verb.lower()
    rest = rest.strip()
    words = rest.split()

    if verb in ("quit", "exit"):
        return False
    if verb == "help":
        print(PLAY_HELP)
        return True
    if verb == "state":
        print(render_state(session))
        return True

    if verb == "host" and words:
        result = session.host(words[0])
    elif verb == "join" and len(words) >= 2:
        result = session.join(words[0], words[1])
    elif verb == "start":
        result = session.start_game()
    elif verb == "nominate" and words:
        result = session.nominate(words[0])
    elif verb == "vote" and words and words[0].lower() in ("yes", "no", "ja", "nein"):
        result = session.vote(words[0].lower() in ("yes", "ja"))
    elif verb == "pick" and words and words[0].lower() in ("liberal", "fascist"):
        color = PolicyColor.FASCIST if words[0].lower() == "fascist" else PolicyColor.LIBERAL
        result = session.pick_card(color)
    elif verb == "veto":
        result = session.veto()
    elif verb == "power":
        result = session.use_power(words[0] if words else None)
    elif verb == "say":
        result = session.send_chat(rest)
    elif verb == "leave":
        result = session.leave()
    elif verb == "dismiss":
        result = session.dismiss_alert()
    else:
        print(f"Unknown command: {line} (type 'help')")
        return True

    if not result.accepted and not result.errors:
        print("Not available right now.")
    return True


def render_state(session: Session) -> str:
    """Plain-text summary of the session and snapshot."""
    snapshot = session.store.snapshot
    me = session.player_id
    lines = [
        f"Connection: {session.connection_state.value}  Auth: {session.auth_phase.value}",
        f"Phase: {snapshot.phase.value}",
    ]
    if session.ready_to_join:
        lines.append("Ready to host or join.")
    if snapshot.winner:
        lines.append(f"Game over! {snapshot.winner.value}s win!")
    if snapshot.power:
        lines.append(f"Power: {snapshot.power.value}")
    lines.append(
        f"Policies: liberal {snapshot.liberal_policies}  fascist {snapshot.fascist_policies}"
        f"  election tracker {snapshot.election_tracker}"
    )

    for player in snapshot.ordered_players():
        tags = []
        if player.player_id == me:
            tags.append("you")
        if player.player_id == snapshot.host and not snapshot.has_started:
            tags.append("host")
        if player.player_id == snapshot.president:
            tags.append("president")
        if player.player_id == snapshot.chancellor:
            tags.append("chancellor")
        if player.role:
            tags.append(player.role.value)
        if player.dead:
            tags.append("dead")
        if player.vote is not None:
            tags.append("ja" if player.vote else "nein")
        suffix = f" ({', '.join(tags)})" if tags else ""
        lines.append(f"  {player.player_id}  {player.name}{suffix}")

    if snapshot.cards:
        lines.append("Cards: " + ", ".join(c.value for c in snapshot.cards))
    if session.store.phase == TurnPhase.VOTING:
        lines.append(f"{session.store.remaining_voters()} voters remaining")
    if session.is_my_turn():
        lines.append("Your move.")
    return "\n".join(lines)


if __name__ == "__main__":
    main()
