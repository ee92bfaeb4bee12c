# tests/fakes.py
from __future__ import annotations

import asyncio


class InMemoryTrustStore:
    def __init__(self, records: dict[str, str] | None = None):
        self.records = dict(records or {})
        self.saves: list[tuple[str, str]] = []
        self.deletes: list[str] = []

    def get(self, host):
        return self.records.get(host)

    def save(self, host, fingerprint):
        self.saves.append((host, fingerprint))
        self.records[host] = fingerprint

    def delete(self, host):
        self.deletes.append(host)
        self.records.pop(host, None)


class BrokenTrustStore:
    """Every call fails, like a store whose backend is down."""

    def get(self, host):
        raise ConnectionError("store unavailable")

    def save(self, host, fingerprint):
        raise ConnectionError("store unavailable")

    def delete(self, host):
        raise ConnectionError("store unavailable")


class FakeStream:
    """
    Scripted server side of one connection.
    chunks are returned one per receive(); afterwards the peer "closes".
    A None entry yields neither data nor a close signal (a stall).
    An exception instance entry is raised from receive().
    """

    def __init__(self, chunks=(), cert: bytes | None = b"cert-A"):
        self._chunks = list(chunks)
        self.cert = cert
        self.sent: list[bytes] = []
        self.close_calls = 0
        self.receive_calls = 0

    def peer_certificate(self):
        return self.cert

    async def send(self, data):
        self.sent.append(data)

    async def receive(self, max_bytes):
        self.receive_calls += 1
        if not self._chunks:
            return b"", True
        item = self._chunks.pop(0)
        if item is None:
            return b"", False
        if isinstance(item, BaseException):
            raise item
        if len(item) > max_bytes:
            self._chunks.insert(0, item[max_bytes:])
            item = item[:max_bytes]
        return item, False

    async def close(self):
        self.close_calls += 1

    @property
    def unread(self) -> int:
        return len(self._chunks)


class BlockingStream(FakeStream):
    """Header arrives, then receive() blocks until the stream is closed."""

    def __init__(self, header: bytes, cert: bytes = b"cert-A"):
        super().__init__([header], cert=cert)
        self.waiting = asyncio.Event()
        self._closed = asyncio.Event()

    async def receive(self, max_bytes):
        if self.unread:
            return await super().receive(max_bytes)
        self.waiting.set()
        await self._closed.wait()
        raise ConnectionResetError("stream closed under reader")

    async def close(self):
        await super().close()
        self._closed.set()


class FakeTransport:
    """Hands out scripted streams in order, one per open()."""

    def __init__(self, *streams, open_error: BaseException | None = None):
        self._streams = list(streams)
        self.open_error = open_error
        self.opened: list[tuple[str, int]] = []
        self.handed_out: list[FakeStream] = []

    async def open(self, host, port):
        self.opened.append((host, port))
        if self.open_error is not None:
            raise self.open_error
        stream = self._streams.pop(0)
        self.handed_out.append(stream)
        return stream


class FakeRedis:
    def __init__(self):
        self.db = {}

    def get(self, key):
        return self.db.get(key)

    def set(self, key, value):
        self.db[key] = value

    def delete(self, key):
        self.db.pop(key, None)


class GatedTransport(FakeTransport):
    """open() parks until release() is called, like a slow TLS handshake."""

    def __init__(self, *streams):
        super().__init__(*streams)
        self.entered = asyncio.Event()
        self._gate = asyncio.Event()

    def release(self):
        self._gate.set()

    async def open(self, host, port):
        self.entered.set()
        await self._gate.wait()
        return await super().open(host, port)
