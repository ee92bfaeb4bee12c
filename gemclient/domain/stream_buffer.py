# /gemclient/domain/stream_buffer.py
from __future__ import annotations

import logging

from gemclient.config import settings
from gemclient.domain.connection import GeminiConnection
from gemclient.domain.errors import ConnectionClosedError

LOG = logging.getLogger("stream_buffer")

_LF = 0x0A


class ByteStreamBuffer:
    """
    Line and body reader over one connection.
    Bytes read past the header's LF are carried over and handed out before
    the transport is touched again, so nothing is lost at the header/body seam.
    """

    def __init__(self, conn: GeminiConnection, chunk_size: int = settings.CHUNK_SIZE) -> None:
        self._conn = conn
        self._chunk_size = chunk_size
        self._carry = bytearray()

    @property
    def pending(self) -> int:
        return len(self._carry)

    async def _next_chunk(self) -> bytes:
        if self._carry:
            data = bytes(self._carry)
            self._carry.clear()
            return data
        return await self._conn.receive(self._chunk_size)

    async def read_line(self) -> bytes:
        """Return bytes up to (excluding) the next LF."""
        line = bytearray()
        while True:
            chunk = await self._next_chunk()
            if not chunk:
                raise ConnectionClosedError(
                    f"{self._conn.host} closed the connection before the header line ended"
                )
            idx = chunk.find(_LF)
            if idx < 0:
                line += chunk
                continue
            line += chunk[:idx]
            self._carry += chunk[idx + 1 :]
            return bytes(line)

    async def read_body_until_close(self) -> bytes:
        """Drain carry-over, then read until the peer closes. There is no length field."""
        body = bytearray()
        while True:
            chunk = await self._next_chunk()
            if not chunk:
                break
            body += chunk
        LOG.debug("body.complete", extra={"extra": {"host": self._conn.host, "bytes": len(body)}})
        return bytes(body)
