"""Per-client protocol connection.

Binds one :class:`Session` to the dispatcher and turns inbound wire lines
into outbound wire lines. Transports (the WebSocket route, the HTTP
polling routes) only move strings; they call :meth:`Connection.on_message`
for each inbound line and send what it returns, in order, before reading
the next line.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Callable

from mwosp.core.dispatcher import Dispatcher
from mwosp.domain.models import Session
from mwosp.protocol.codec import decode, encode_command

logger = logging.getLogger(__name__)


class Connection:
    """Protocol state of a single client.

    Usage::

        conn = Connection(dispatcher)
        conn.on_connect()
        for line in conn.on_message("MWOSP-v1 abc 320 240"):
            await websocket.send_text(line)
        ...
        conn.on_disconnect()
    """

    def __init__(self, dispatcher: Dispatcher, peer: str = "-") -> None:
        self._dispatcher = dispatcher
        self._peer = peer
        self._session: Session | None = None
        self._closed = False

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def closed(self) -> bool:
        """True once the client asked to exit or the transport went away."""
        return self._closed

    def on_connect(self) -> Session:
        self._session = Session()
        self._closed = False
        logger.info("Client connected (%s)", self._peer)
        return self._session

    def on_message(self, line: str) -> list[str]:
        """Process one inbound line and return the lines to send back."""
        if self._closed or self._session is None:
            logger.debug("Dropping message on closed connection (%s): %r", self._peer, line)
            return []

        logger.debug("RX %s: %s", self._peer, line)
        result = self._dispatcher.dispatch(decode(line), self._session)
        out = [encode_command(cmd) for cmd in result.commands]
        for reply in out:
            logger.debug("TX %s: %s", self._peer, reply)
        if result.close:
            self._closed = True
        return out

    def on_disconnect(self) -> None:
        if self._session is not None:
            logger.info("Client disconnected (%s)", self._peer)
        self._session = None
        self._closed = True


class SessionRegistry:
    """Connections of the HTTP polling variant, keyed by session id.

    Polling clients never announce that they are gone, so entries idle for
    longer than ``idle_timeout`` seconds are expired on access, and the
    least recently used entry is evicted once ``max_sessions`` is exceeded.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        max_sessions: int = 256,
        idle_timeout: float = 900.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._dispatcher = dispatcher
        self._max_sessions = max_sessions
        self._idle_timeout = idle_timeout
        self._clock = clock
        # Ordered from least to most recently used
        self._connections: OrderedDict[str, Connection] = OrderedDict()
        self._last_seen: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._connections

    def get_or_create(self, session_id: str) -> Connection:
        now = self._clock()
        self._expire(now)
        conn = self._connections.get(session_id)
        if conn is None:
            conn = Connection(self._dispatcher, peer=f"http:{session_id}")
            conn.on_connect()
            self._connections[session_id] = conn
        else:
            self._connections.move_to_end(session_id)
        self._last_seen[session_id] = now

        while len(self._connections) > self._max_sessions:
            oldest = next(iter(self._connections))
            logger.info("Evicting polling session %s (limit %d)", oldest, self._max_sessions)
            self.drop(oldest)
        return conn

    def drop(self, session_id: str) -> bool:
        conn = self._connections.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if conn is None:
            return False
        conn.on_disconnect()
        return True

    def clear(self) -> None:
        for session_id in list(self._connections):
            self.drop(session_id)

    def _expire(self, now: float) -> None:
        for session_id in list(self._connections):
            if now - self._last_seen[session_id] < self._idle_timeout:
                break
            logger.info("Expiring idle polling session %s", session_id)
            self.drop(session_id)
