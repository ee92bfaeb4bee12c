# /gemclient/ports/transport.py
from __future__ import annotations

from typing import Protocol


class TransportStream(Protocol):
    def peer_certificate(self) -> bytes | None:
        """DER bytes of the peer's leaf certificate."""

    async def send(self, data: bytes) -> None:
        """Write data and wait until it is flushed."""

    async def receive(self, max_bytes: int) -> tuple[bytes, bool]:
        """Return (data, complete). complete=True means the peer closed."""

    async def close(self) -> None:
        """Close the stream. Safe to call more than once."""


class TransportPort(Protocol):
    async def open(self, host: str, port: int) -> TransportStream:
        """Open a TLS 1.2/1.3 stream to host:port."""
