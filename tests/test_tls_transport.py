# /tests/test_tls_transport.py
from __future__ import annotations

import ssl

import pytest

from gemclient.adapters.net.asyncio_tls_transport import AsyncioTLSStream, build_tls_context


def test_context_pins_tls_12_to_13_without_ca_checks() -> None:
    ctx = build_tls_context()
    assert ctx.minimum_version is ssl.TLSVersion.TLSv1_2
    assert ctx.maximum_version is ssl.TLSVersion.TLSv1_3
    assert ctx.verify_mode is ssl.CERT_NONE
    assert ctx.check_hostname is False


class _Reader:
    def __init__(self, chunks):
        self._chunks = list(chunks)

    async def read(self, n):
        return self._chunks.pop(0) if self._chunks else b""

    def at_eof(self):
        return not self._chunks


class _SSLObject:
    def getpeercert(self, binary_form=False):
        assert binary_form
        return b"\x30\x82der"


class _Writer:
    def __init__(self):
        self.data = b""
        self.closed = 0

    def get_extra_info(self, name):
        return _SSLObject() if name == "ssl_object" else None

    def write(self, data):
        self.data += data

    async def drain(self):
        pass

    def close(self):
        self.closed += 1

    async def wait_closed(self):
        raise ConnectionResetError("peer went away")


@pytest.mark.asyncio
async def test_stream_maps_reader_and_writer() -> None:
    writer = _Writer()
    stream = AsyncioTLSStream(_Reader([b"20 ok\r\n", b"body"]), writer)

    assert stream.peer_certificate() == b"\x30\x82der"
    await stream.send(b"gemini://example.org/\r\n")
    assert writer.data == b"gemini://example.org/\r\n"

    assert await stream.receive(1024) == (b"20 ok\r\n", False)
    assert await stream.receive(1024) == (b"body", True)
    assert await stream.receive(1024) == (b"", True)


@pytest.mark.asyncio
async def test_close_tolerates_unclean_shutdown_and_repeats() -> None:
    writer = _Writer()
    stream = AsyncioTLSStream(_Reader([]), writer)
    await stream.close()
    await stream.close()
    assert writer.closed == 1
