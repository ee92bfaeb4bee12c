# /gemclient/domain/connection.py
from __future__ import annotations

import logging
import ssl
import threading
from enum import Enum

from gemclient.domain.errors import (
    ConnectionClosedError,
    CustomError,
    TransportError,
)
from gemclient.domain.tofu import MismatchPolicy, TrustDecision, verify_peer
from gemclient.ports.transport import TransportPort, TransportStream
from gemclient.ports.trust_store import TrustStorePort

LOG = logging.getLogger("connection")


class ConnectionState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    READY = "ready"
    SENDING = "sending"
    AWAITING_HEADER = "awaiting_header"
    STREAMING_BODY = "streaming_body"
    REDIRECTING = "redirecting"
    CLOSED = "closed"
    FAILED = "failed"
    CANCELLED = "cancelled"


_TERMINAL = frozenset({ConnectionState.CLOSED, ConnectionState.FAILED, ConnectionState.CANCELLED})

# Every non-terminal state may also fail or be cancelled.
_VALID_TRANSITIONS: dict[ConnectionState, set[ConnectionState]] = {
    ConnectionState.IDLE: {ConnectionState.CONNECTING, ConnectionState.CLOSED},
    ConnectionState.CONNECTING: {ConnectionState.READY},
    ConnectionState.READY: {ConnectionState.SENDING, ConnectionState.CLOSED},
    ConnectionState.SENDING: {ConnectionState.AWAITING_HEADER, ConnectionState.CLOSED},
    ConnectionState.AWAITING_HEADER: {
        ConnectionState.STREAMING_BODY,
        ConnectionState.REDIRECTING,
        ConnectionState.CLOSED,
    },
    ConnectionState.STREAMING_BODY: {ConnectionState.CLOSED},
    ConnectionState.REDIRECTING: {ConnectionState.CLOSED},
    ConnectionState.CLOSED: set(),
    ConnectionState.FAILED: set(),
    ConnectionState.CANCELLED: set(),
}
for _state, _targets in _VALID_TRANSITIONS.items():
    if _state not in _TERMINAL:
        _targets.update({ConnectionState.FAILED, ConnectionState.CANCELLED})


class ConnectionStateError(Exception):
    """Raised when an illegal state transition is attempted."""

    def __init__(self, from_state: ConnectionState, to_state: ConnectionState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"illegal connection transition: {from_state.value} -> {to_state.value}")


class GeminiConnection:
    """
    One TLS connection for one request/response exchange. Never reused.

    State changes go through a single lock so that a late failure report
    cannot overwrite an explicit cancel: CANCELLED is sticky and FAILED is
    only recorded while the connection is still live.
    """

    def __init__(
        self,
        host: str,
        port: int,
        *,
        transport: TransportPort,
        trust_store: TrustStorePort,
        mismatch_policy: MismatchPolicy = MismatchPolicy.KEEP,
    ) -> None:
        self.host = host
        self.port = port
        self._transport = transport
        self._trust_store = trust_store
        self._mismatch_policy = mismatch_policy
        self._stream: TransportStream | None = None
        self._stream_closed = False
        self._lock = threading.Lock()
        self._state = ConnectionState.IDLE
        self.failure: BaseException | None = None

    # --- state ---

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in _TERMINAL

    def _transition(self, target: ConnectionState) -> None:
        with self._lock:
            if target not in _VALID_TRANSITIONS[self._state]:
                if self._state is ConnectionState.CANCELLED:
                    raise ConnectionClosedError(f"connection to {self.host} was cancelled")
                raise ConnectionStateError(self._state, target)
            old, self._state = self._state, target
        LOG.debug(
            "connection.state",
            extra={"extra": {"host": self.host, "from": old.value, "to": target.value}},
        )

    def fail(self, error: BaseException) -> bool:
        """Record a failure. Returns False when it arrived after a cancel or close."""
        with self._lock:
            if self._state in _TERMINAL:
                return False
            self._state = ConnectionState.FAILED
            self.failure = error
        LOG.warning(
            "connection.failed",
            extra={"extra": {"host": self.host, "error": type(error).__name__, "detail": str(error)}},
        )
        return True

    def begin_body(self) -> None:
        self._transition(ConnectionState.STREAMING_BODY)

    def begin_redirect(self) -> None:
        self._transition(ConnectionState.REDIRECTING)

    # --- I/O ---

    async def open(self) -> TrustDecision:
        self._transition(ConnectionState.CONNECTING)
        try:
            self._stream = await self._transport.open(self.host, self.port)
        except (OSError, ssl.SSLError, ValueError) as e:
            # ValueError: host name the IDNA codec cannot encode
            raise TransportError(f"cannot connect to {self.host}:{self.port}: {e}") from e

        with self._lock:
            if self._state is ConnectionState.CANCELLED:
                raise ConnectionClosedError(f"connection to {self.host} was cancelled")

        der = self._stream.peer_certificate()
        if not der:
            raise TransportError(f"{self.host} presented no certificate")
        # raises CertificateMismatchError / TrustStoreError; the caller closes the stream
        decision = verify_peer(self.host, der, self._trust_store, self._mismatch_policy)

        self._transition(ConnectionState.READY)
        LOG.info(
            "connection.ready",
            extra={"extra": {"host": self.host, "port": self.port, "trust": decision.value}},
        )
        return decision

    def _require_stream(self) -> TransportStream:
        if self._stream is None or self._stream_closed:
            raise ConnectionClosedError(f"connection to {self.host} is not open")
        return self._stream

    async def send(self, data: bytes) -> None:
        self._transition(ConnectionState.SENDING)
        stream = self._require_stream()
        try:
            await stream.send(data)
        except (OSError, ssl.SSLError) as e:
            raise TransportError(f"send to {self.host} failed: {e}") from e
        self._transition(ConnectionState.AWAITING_HEADER)

    async def receive(self, max_bytes: int) -> bytes:
        """Return the next chunk, or b"" once the peer has closed."""
        stream = self._require_stream()
        try:
            data, complete = await stream.receive(max_bytes)
        except (OSError, ssl.SSLError) as e:
            raise TransportError(f"receive from {self.host} failed: {e}") from e
        if data:
            return data
        if complete:
            return b""
        raise CustomError("no data received")

    async def close(self) -> None:
        with self._lock:
            if self._state not in _TERMINAL:
                self._state = ConnectionState.CLOSED
        await self._close_stream()

    async def cancel(self) -> bool:
        """Cancel the exchange. Returns False if it had already failed or closed."""
        changed = False
        with self._lock:
            if self._state not in _TERMINAL:
                self._state = ConnectionState.CANCELLED
                changed = True
            cancelled = self._state is ConnectionState.CANCELLED
        if changed:
            LOG.info("connection.cancelled", extra={"extra": {"host": self.host}})
        await self._close_stream()
        return cancelled

    async def _close_stream(self) -> None:
        with self._lock:
            if self._stream is None or self._stream_closed:
                return
            self._stream_closed = True
            stream = self._stream
        try:
            await stream.close()
        except (OSError, ssl.SSLError) as e:
            # peer already gone; nothing left to release
            LOG.debug("connection.close_error", extra={"extra": {"host": self.host, "detail": str(e)}})
