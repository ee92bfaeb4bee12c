# /gemclient/adapters/repositories/redis_trust_store.py
from __future__ import annotations

import logging

import redis

LOG = logging.getLogger("adapter.trust_store.redis")


class RedisTrustStore:
    """Pinned certificate fingerprints, one Redis string per host."""

    def __init__(self, redis_url: str, prefix: str = "tofu") -> None:
        self._r = redis.Redis.from_url(redis_url, decode_responses=True)
        self._prefix = prefix

    def _key(self, host: str) -> str:
        return f"{self._prefix}:{host.lower()}"

    def get(self, host: str) -> str | None:
        return self._r.get(self._key(host))

    def save(self, host: str, fingerprint: str) -> None:
        self._r.set(self._key(host), fingerprint)
        LOG.info("store.save", extra={"extra": {"host": host}})

    def delete(self, host: str) -> None:
        self._r.delete(self._key(host))
        LOG.info("store.delete", extra={"extra": {"host": host}})
