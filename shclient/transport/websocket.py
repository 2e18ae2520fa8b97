"""
WebSocket Connector - asyncio driver for the transport channel.

Each connect() spawns one task that:
1. Opens the websocket (reports OPENED)
2. Relays every received frame (reports MESSAGE)
3. Reports CLOSED exactly once when the socket ends or fails to open

Outbound frames go through a queue drained by a writer task, so they reach
the socket in the order send() was called.
"""

from __future__ import annotations
import asyncio
import logging

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from .channel import ChannelEvent, Connector, TransportChannel

logger = logging.getLogger(__name__)

OPEN_TIMEOUT = 10.0


class WebSocketConnector(Connector):
    """
    Connector backed by the `websockets` asyncio client.

    Must be used from a running event loop; every channel.dispatch() call
    happens on that loop, so the client stays single-threaded.
    """

    def __init__(self, url: str, open_timeout: float = OPEN_TIMEOUT):
        self.url = url
        self.open_timeout = open_timeout

        self._task: asyncio.Task | None = None
        self._outbox: asyncio.Queue[str] | None = None

    @property
    def connected(self) -> bool:
        return self._outbox is not None

    def connect(self, channel: TransportChannel):
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(channel))

    def send(self, data: str):
        if self._outbox is None:
            logger.warning("No open websocket, frame dropped")
            return
        self._outbox.put_nowait(data)

    def close(self):
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._outbox = None

    async def _run(self, channel: TransportChannel):
        cancelled = False
        try:
            async with connect(self.url, open_timeout=self.open_timeout) as websocket:
                self._outbox = asyncio.Queue()
                writer = asyncio.create_task(self._write(websocket, self._outbox))
                channel.dispatch(ChannelEvent.opened())
                try:
                    async for frame in websocket:
                        channel.dispatch(ChannelEvent.message(frame))
                finally:
                    writer.cancel()
        except ConnectionClosed as e:
            logger.info("Connection to %s closed: %s", self.url, e)
        except (OSError, WebSocketException, asyncio.TimeoutError) as e:
            logger.info("Connection to %s failed: %s", self.url, e)
        except asyncio.CancelledError:
            # close() was called; it reports nothing
            cancelled = True
            raise
        finally:
            self._outbox = None
            if not cancelled:
                channel.dispatch(ChannelEvent.closed())

    async def _write(self, websocket: ClientConnection, outbox: asyncio.Queue[str]):
        while True:
            data = await outbox.get()
            try:
                await websocket.send(data)
            except ConnectionClosed:
                # The reader side reports the close
                return
