# /gemclient/domain/errors.py
from __future__ import annotations


class GeminiError(Exception):
    """Base class for every error surfaced by GeminiClient.get."""


class InvalidURLError(GeminiError):
    pass


class InvalidResponseError(GeminiError):
    pass


class InvalidRedirectURLError(GeminiError):
    pass


class TooManyRedirectsError(GeminiError):
    def __init__(self, url: str, limit: int) -> None:
        self.url = url
        self.limit = limit
        super().__init__(f"more than {limit} redirects while fetching {url}")


class ConnectionClosedError(GeminiError):
    pass


class CertificateMismatchError(GeminiError):
    """The peer presented a certificate other than the one pinned for host."""

    def __init__(self, host: str, expected: str, actual: str) -> None:
        self.host = host
        self.expected = expected
        self.actual = actual
        super().__init__(f"certificate for {host} does not match pinned fingerprint")


class TransportError(GeminiError):
    """Socket or TLS failure. The original exception is the __cause__."""


class TrustStoreError(GeminiError):
    pass


class CustomError(GeminiError):
    pass
