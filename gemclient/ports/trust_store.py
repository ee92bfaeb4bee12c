# /gemclient/ports/trust_store.py
from __future__ import annotations

from typing import Protocol


class TrustStorePort(Protocol):
    def get(self, host: str) -> str | None:
        """Return the pinned fingerprint for host, or None if never seen."""

    def save(self, host: str, fingerprint: str) -> None:
        """Pin fingerprint for host, replacing any previous record."""

    def delete(self, host: str) -> None:
        """Forget host. Deleting an unknown host is not an error."""
