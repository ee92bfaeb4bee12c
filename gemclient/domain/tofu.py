# /gemclient/domain/tofu.py
from __future__ import annotations

import base64
import hashlib
import logging
from enum import Enum

from gemclient.domain.errors import CertificateMismatchError, TrustStoreError
from gemclient.ports.trust_store import TrustStorePort

LOG = logging.getLogger("tofu")


class TrustDecision(str, Enum):
    FIRST_USE = "first_use"  # unknown host, fingerprint pinned now
    KNOWN = "known"  # matches the pinned fingerprint


class MismatchPolicy(str, Enum):
    KEEP = "keep"  # leave the pinned record; reset via GeminiClient.forget_host
    FORGET = "forget"  # drop the stale record so the next contact re-pins


def fingerprint(der: bytes) -> str:
    """base64(SHA-256(leaf certificate DER))."""
    return base64.b64encode(hashlib.sha256(der).digest()).decode("ascii")


def verify_peer(
    host: str,
    der: bytes,
    store: TrustStorePort,
    policy: MismatchPolicy = MismatchPolicy.KEEP,
) -> TrustDecision:
    """
    Trust-on-first-use decision for one handshake. Owns no state of its own:
    everything it knows comes from the arguments.

    Raises CertificateMismatchError on a fingerprint change and TrustStoreError
    when the store cannot answer; both mean the handshake is rejected.
    """
    actual = fingerprint(der)

    try:
        stored = store.get(host)
    except Exception as e:
        LOG.error("tofu.store_unavailable", extra={"extra": {"host": host, "op": "get"}})
        raise TrustStoreError(f"trust store lookup failed for {host}") from e

    if stored is None:
        try:
            store.save(host, actual)
        except Exception as e:
            LOG.error("tofu.store_unavailable", extra={"extra": {"host": host, "op": "save"}})
            raise TrustStoreError(f"cannot pin certificate for {host}") from e
        LOG.info("tofu.pinned", extra={"extra": {"host": host, "fingerprint": actual}})
        return TrustDecision.FIRST_USE

    if stored == actual:
        return TrustDecision.KNOWN

    LOG.warning(
        "tofu.mismatch",
        extra={"extra": {"host": host, "expected": stored, "actual": actual, "policy": policy.value}},
    )
    if policy is MismatchPolicy.FORGET:
        try:
            store.delete(host)
        except Exception as e:
            raise TrustStoreError(f"cannot forget stale certificate for {host}") from e
    raise CertificateMismatchError(host, stored, actual)
