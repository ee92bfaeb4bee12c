# /gemclient/adapters/system/client_factory.py
from __future__ import annotations

import logging

from gemclient.adapters.net.asyncio_tls_transport import AsyncioTLSTransport
from gemclient.adapters.repositories.redis_trust_store import RedisTrustStore
from gemclient.adapters.system.logging_cfg import configure_logger
from gemclient.config import Settings, settings
from gemclient.domain.gemini_client import GeminiClient
from gemclient.domain.tofu import MismatchPolicy
from gemclient.ports.trust_store import TrustStorePort

LOG = logging.getLogger("adapter.client_factory")


def build_client(
    cfg: Settings = settings,
    *,
    trust_store: TrustStorePort | None = None,
    configure_logging: bool = True,
) -> GeminiClient:
    """
    Wire a GeminiClient from settings: asyncio TLS transport plus a Redis
    trust store unless one is passed in.
    """
    if configure_logging:
        configure_logger(cfg.LOG_LEVEL)

    store = trust_store or RedisTrustStore(cfg.REDIS_URL, prefix=cfg.TOFU_KEY_PREFIX)
    client = GeminiClient(
        AsyncioTLSTransport(),
        store,
        mismatch_policy=MismatchPolicy(cfg.TOFU_MISMATCH_POLICY.lower()),
        chunk_size=cfg.CHUNK_SIZE,
        max_redirects=cfg.MAX_REDIRECTS,
        timeout=cfg.TIMEOUT_SECONDS,
    )
    LOG.info(
        "client.built",
        extra={
            "extra": {
                "trust_store": type(store).__name__,
                "mismatch_policy": client.mismatch_policy.value,
                "timeout": cfg.TIMEOUT_SECONDS,
            }
        },
    )
    return client
