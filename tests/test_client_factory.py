# /tests/test_client_factory.py
from __future__ import annotations

from gemclient.adapters.net.asyncio_tls_transport import AsyncioTLSTransport
from gemclient.adapters.system.client_factory import build_client
from gemclient.config import Settings
from gemclient.domain.tofu import MismatchPolicy
from tests.fakes import InMemoryTrustStore


def test_build_client_from_settings() -> None:
    cfg = Settings(CHUNK_SIZE=1024, TIMEOUT_SECONDS=2.5, TOFU_MISMATCH_POLICY="FORGET")
    store = InMemoryTrustStore()

    client = build_client(cfg, trust_store=store, configure_logging=False)

    assert isinstance(client.transport, AsyncioTLSTransport)
    assert client.trust_store is store
    assert client.chunk_size == 1024
    assert client.timeout == 2.5
    assert client.max_redirects == 5
    assert client.mismatch_policy is MismatchPolicy.FORGET


def test_default_policy_is_keep() -> None:
    client = build_client(Settings(), trust_store=InMemoryTrustStore(), configure_logging=False)
    assert client.mismatch_policy is MismatchPolicy.KEEP
