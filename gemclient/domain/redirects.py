# /gemclient/domain/redirects.py
from __future__ import annotations

import logging
import urllib.parse

from gemclient.config import settings
from gemclient.domain.errors import InvalidRedirectURLError, InvalidURLError, TooManyRedirectsError
from gemclient.domain.models import SCHEME, RequestContext

LOG = logging.getLogger("redirects")


def _join(base: str, ref: str) -> str:
    """
    urljoin for gemini URLs. urljoin ignores relative references on schemes
    it does not know, so the join runs on the scheme-relative form instead.
    """
    if urllib.parse.urlsplit(ref).scheme:
        return ref
    prefix = f"{SCHEME}:"
    joined = urllib.parse.urljoin(base.removeprefix(prefix), ref)
    return prefix + joined


def resolve_redirect(
    ctx: RequestContext, meta: str, *, max_redirects: int = settings.MAX_REDIRECTS
) -> RequestContext:
    """
    Resolve a 3x meta against the current hop and return the next hop.
    Raises before any new connection is opened, so a refused hop costs nothing.
    """
    try:
        target = _join(ctx.url, meta.strip())
        nxt = RequestContext.from_url(target, redirects=ctx.redirects + 1)
    except (InvalidURLError, ValueError) as e:
        raise InvalidRedirectURLError(f"cannot follow redirect {meta!r} from {ctx.url}") from e

    if nxt.redirects > max_redirects:
        LOG.warning(
            "redirect.limit",
            extra={"extra": {"url": ctx.url, "target": nxt.url, "limit": max_redirects}},
        )
        raise TooManyRedirectsError(ctx.url, max_redirects)

    LOG.info(
        "redirect.resolved",
        extra={"extra": {"from": ctx.url, "to": nxt.url, "depth": nxt.redirects}},
    )
    return nxt
