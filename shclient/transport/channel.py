"""
Transport Channel - One persistent bidirectional connection with auto-reconnect.

The channel:
1. Owns the ConnectionState (no other component sets it)
2. Turns connector callbacks into explicit ChannelEvents
3. Forwards every event to its subscribers, in delivery order
4. Schedules a reconnect on every close, forever, until shut down

Reconnect policy: fixed short delay (100 ms by default), no backoff and no
attempt limit. The server is a single always-on process whose outages are
short blips. At most one reconnect timer is outstanding; a new close
replaces it and an open cancels it.

The connector does the actual I/O (see websocket.py). The scheduler is
anything with `call_later(delay, callback)` returning a cancellable handle,
which an asyncio event loop already is.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

RECONNECT_DELAY = 0.1


class ConnectionState(Enum):
    """Lifecycle of the channel."""
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class ChannelEventKind(Enum):
    OPENED = "opened"
    MESSAGE = "message"
    CLOSED = "closed"


@dataclass(frozen=True)
class ChannelEvent:
    """A transport lifecycle event or an inbound frame."""
    kind: ChannelEventKind
    data: str | bytes | None = None

    @classmethod
    def opened(cls) -> ChannelEvent:
        return cls(kind=ChannelEventKind.OPENED)

    @classmethod
    def message(cls, data: str | bytes) -> ChannelEvent:
        return cls(kind=ChannelEventKind.MESSAGE, data=data)

    @classmethod
    def closed(cls) -> ChannelEvent:
        return cls(kind=ChannelEventKind.CLOSED)


class TimerHandle(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


class Connector(ABC):
    """
    Abstract base class for connection drivers.

    Implementations:
    - WebSocketConnector: asyncio + websockets
    - FakeConnector (tests): records frames, events injected by hand
    """

    @abstractmethod
    def connect(self, channel: TransportChannel):
        """
        Start one connection attempt.

        Must not block. Reports the outcome by calling channel.dispatch()
        with OPENED, then MESSAGE events, then exactly one CLOSED (also
        when the attempt fails before opening).
        """
        pass

    @abstractmethod
    def send(self, data: str):
        """Queue a text frame on the open connection."""
        pass

    @abstractmethod
    def close(self):
        """Tear down the current connection without reporting CLOSED."""
        pass


ChannelSubscriber = Callable[[ChannelEvent], None]


class TransportChannel:
    """
    Connection lifecycle plus reconnection policy.

    Usage:
        channel = TransportChannel(connector, scheduler=loop)
        channel.subscribe(session.handle_channel_event)
        channel.open()
    """

    def __init__(
        self,
        connector: Connector,
        scheduler: Scheduler,
        reconnect_delay: float = RECONNECT_DELAY,
    ):
        self.connector = connector
        self.scheduler = scheduler
        self.reconnect_delay = reconnect_delay

        self._state = ConnectionState.CLOSED
        self._timer: TimerHandle | None = None
        self._shut_down = False
        self._subscribers: list[ChannelSubscriber] = []

        # Number of reconnects scheduled since the last OPENED event
        self.reconnect_attempts = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == ConnectionState.OPEN

    @property
    def reconnect_pending(self) -> bool:
        return self._timer is not None

    def subscribe(self, subscriber: ChannelSubscriber):
        self._subscribers.append(subscriber)

    def open(self):
        """Start a connection attempt."""
        if self._shut_down:
            return
        if self._state != ConnectionState.CLOSED:
            logger.debug("open() ignored in state %s", self._state.value)
            return
        self._state = ConnectionState.CONNECTING
        self.connector.connect(self)

    def send(self, data: str) -> bool:
        """
        Send a text frame. Returns False (and sends nothing) unless open.

        Gating on connection state is the caller's job.
        """
        if self._state != ConnectionState.OPEN:
            logger.warning("Dropped outbound frame: channel is %s", self._state.value)
            return False
        self.connector.send(data)
        return True

    def dispatch(self, event: ChannelEvent):
        """Apply one transport event, then forward it to subscribers."""
        if self._shut_down:
            return

        if event.kind == ChannelEventKind.OPENED:
            self._state = ConnectionState.OPEN
            self._cancel_timer()
            self.reconnect_attempts = 0
            logger.info("Channel open")
        elif event.kind == ChannelEventKind.CLOSED:
            self._state = ConnectionState.CLOSED
            self._schedule_reconnect()

        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                # A failing subscriber must not stall the reconnect loop
                logger.exception("Subscriber failed on %s event", event.kind.value)

    def shutdown(self):
        """Stop reconnecting and drop the connection. Final."""
        self._shut_down = True
        self._cancel_timer()
        self._state = ConnectionState.CLOSED
        self.connector.close()

    def _schedule_reconnect(self):
        self._cancel_timer()
        self.reconnect_attempts += 1
        logger.info(
            "Channel closed, reconnecting in %.0f ms (attempt %d)",
            self.reconnect_delay * 1000,
            self.reconnect_attempts,
        )
        self._timer = self.scheduler.call_later(self.reconnect_delay, self._reconnect)

    def _reconnect(self):
        self._timer = None
        self.open()

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
