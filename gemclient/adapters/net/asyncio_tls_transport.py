# /gemclient/adapters/net/asyncio_tls_transport.py
from __future__ import annotations

import asyncio
import logging
import ssl

LOG = logging.getLogger("adapter.tls_transport")


def build_tls_context() -> ssl.SSLContext:
    """
    TLS 1.2-1.3 client context with CA/hostname checks off.
    Gemini servers are mostly self-signed; trust is decided by TOFU on the
    leaf fingerprint once the handshake completes.
    """
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    ctx.maximum_version = ssl.TLSVersion.TLSv1_3
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


class AsyncioTLSStream:
    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer
        self._closed = False

    def peer_certificate(self) -> bytes | None:
        ssl_obj = self._writer.get_extra_info("ssl_object")
        if ssl_obj is None:
            return None
        return ssl_obj.getpeercert(binary_form=True)

    async def send(self, data: bytes) -> None:
        self._writer.write(data)
        await self._writer.drain()

    async def receive(self, max_bytes: int) -> tuple[bytes, bool]:
        data = await self._reader.read(max_bytes)
        return data, self._reader.at_eof()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except (ConnectionError, ssl.SSLError) as e:
            # servers commonly drop the socket without a TLS close_notify
            LOG.debug("stream.close_unclean", extra={"extra": {"detail": str(e)}})


class AsyncioTLSTransport:
    def __init__(self, ssl_context: ssl.SSLContext | None = None) -> None:
        self._ssl = ssl_context or build_tls_context()

    async def open(self, host: str, port: int) -> AsyncioTLSStream:
        LOG.debug("connecting", extra={"extra": {"host": host, "port": port}})
        reader, writer = await asyncio.open_connection(
            host, port, ssl=self._ssl, server_hostname=host
        )
        return AsyncioTLSStream(reader, writer)
