"""
Client configuration.

Defaults come from SHCLIENT_* environment variables; CLI flags override
individual fields.

    SHCLIENT_SERVER_URL       websocket endpoint (default ws://localhost:8000/ws/)
    SHCLIENT_IDENTITY_PATH    identity file (default ~/.shclient/identity.json)
    SHCLIENT_RECONNECT_DELAY  seconds between reconnect attempts (default 0.1)
    SHCLIENT_LOG_LEVEL        log level name (default WARNING)
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping
import os

from .transport.channel import RECONNECT_DELAY

DEFAULT_SERVER_URL = "ws://localhost:8000/ws/"
DEFAULT_LOG_LEVEL = "WARNING"


def default_identity_path() -> Path:
    return Path.home() / ".shclient" / "identity.json"


@dataclass(frozen=True)
class ClientConfig:
    """Settings for one client process."""
    server_url: str = DEFAULT_SERVER_URL
    identity_path: Path | None = None
    reconnect_delay: float = RECONNECT_DELAY
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        if self.identity_path is None:
            object.__setattr__(self, "identity_path", default_identity_path())
        if self.reconnect_delay < 0:
            raise ValueError(f"reconnect_delay must be >= 0, got {self.reconnect_delay}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a config from the SHCLIENT_* environment variables."""
        env = os.environ if environ is None else environ

        reconnect_delay = RECONNECT_DELAY
        raw_delay = env.get("SHCLIENT_RECONNECT_DELAY")
        if raw_delay:
            try:
                reconnect_delay = float(raw_delay)
            except ValueError:
                raise ValueError(f"SHCLIENT_RECONNECT_DELAY must be a number, got {raw_delay!r}")

        identity_path = env.get("SHCLIENT_IDENTITY_PATH")
        return cls(
            server_url=env.get("SHCLIENT_SERVER_URL", DEFAULT_SERVER_URL),
            identity_path=Path(identity_path).expanduser() if identity_path else None,
            reconnect_delay=reconnect_delay,
            log_level=env.get("SHCLIENT_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )

    def with_overrides(self, **overrides) -> ClientConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "identity_path" in changes:
            changes["identity_path"] = Path(changes["identity_path"]).expanduser()
        return replace(self, **changes)
