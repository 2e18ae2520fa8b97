"""
Pytest fixtures for shclient tests.
"""

import pytest

from ..client_core.store import GameStateStore
from ..identity.backends import MemoryBackend
from ..identity.store import IdentityStore, SessionIdentity
from ..session import Session, SessionManager
from ..transport.channel import TransportChannel
from .fakes import FakeConnector, FakeScheduler


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def channel(connector: FakeConnector, scheduler: FakeScheduler) -> TransportChannel:
    """A channel over the fake connector, not yet opened."""
    return TransportChannel(connector=connector, scheduler=scheduler)


@pytest.fixture
def store() -> GameStateStore:
    return GameStateStore()


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def identity_store(backend: MemoryBackend) -> IdentityStore:
    return IdentityStore(backend)


@pytest.fixture
def stored_identity(identity_store: IdentityStore) -> SessionIdentity:
    """Durable identity for the default seat, as left by an earlier run."""
    identity = SessionIdentity(
        nickname="anna",
        game_id="G1",
        player_id="P7",
        player_secret="S9",
    )
    identity_store.save(identity)
    return identity


@pytest.fixture
def connectors() -> list[FakeConnector]:
    """Every connector the manager has built, in creation order."""
    return []


@pytest.fixture
def manager(identity_store, scheduler, connectors) -> SessionManager:
    def factory():
        connector = FakeConnector()
        connectors.append(connector)
        return connector

    return SessionManager(
        identity_store=identity_store,
        connector_factory=factory,
        scheduler=scheduler,
    )


@pytest.fixture
def session(manager: SessionManager) -> Session:
    """Default-seat session; channel is CONNECTING until the test opens it."""
    return manager.create_session("")


@pytest.fixture
def wire(session: Session, connectors) -> FakeConnector:
    """The fake connector behind the default session."""
    return connectors[0]
