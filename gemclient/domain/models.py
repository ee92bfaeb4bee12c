# /gemclient/domain/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlsplit

from gemclient.config import settings
from gemclient.domain.codec import StatusCategory, classify, describe_status
from gemclient.domain.errors import InvalidURLError

SCHEME = "gemini"


@dataclass(frozen=True, slots=True)
class RequestContext:
    """One hop of a logical fetch. Redirect depth travels here, never on the URL."""

    url: str
    host: str
    port: int = settings.DEFAULT_PORT
    redirects: int = 0

    @classmethod
    def from_url(cls, url: str, *, redirects: int = 0) -> RequestContext:
        try:
            parts = urlsplit(url)
            port = parts.port
        except ValueError as e:
            raise InvalidURLError(f"cannot parse {url!r}: {e}") from e
        scheme = url.partition(":")[0]
        if scheme != SCHEME:  # exact match; urlsplit would lowercase it
            raise InvalidURLError(f"unsupported scheme {scheme!r} in {url!r}")
        if not parts.hostname:
            raise InvalidURLError(f"missing host in {url!r}")
        return cls(
            url=url,
            host=parts.hostname,
            port=port if port is not None else settings.DEFAULT_PORT,
            redirects=redirects,
        )


@dataclass(slots=True)
class GeminiResponse:
    status: int
    meta: str
    body: bytes = b""
    url: str | None = field(default=None, compare=False)  # final URL after redirects

    @property
    def category(self) -> StatusCategory:
        return classify(self.status)

    @property
    def description(self) -> str:
        return describe_status(self.status)
