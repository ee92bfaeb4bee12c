# /gemclient/domain/gemini_client.py
from __future__ import annotations

import asyncio
import logging

from gemclient.config import settings
from gemclient.domain.codec import StatusCategory, build_request_line, classify, parse_header
from gemclient.domain.connection import ConnectionState, GeminiConnection
from gemclient.domain.errors import GeminiError
from gemclient.domain.models import GeminiResponse, RequestContext
from gemclient.domain.redirects import resolve_redirect
from gemclient.domain.stream_buffer import ByteStreamBuffer
from gemclient.domain.tofu import MismatchPolicy
from gemclient.ports.transport import TransportPort
from gemclient.ports.trust_store import TrustStorePort

LOG = logging.getLogger("gemini_client")


class GeminiClient:
    """Fetches gemini:// URLs over injected transport and trust-store ports."""

    def __init__(
        self,
        transport: TransportPort,
        trust_store: TrustStorePort,
        *,
        mismatch_policy: MismatchPolicy = MismatchPolicy.KEEP,
        chunk_size: int = settings.CHUNK_SIZE,
        max_redirects: int = settings.MAX_REDIRECTS,
        timeout: float | None = None,
    ) -> None:
        if not 0 <= max_redirects <= settings.MAX_REDIRECTS:
            raise ValueError(f"max_redirects must be between 0 and {settings.MAX_REDIRECTS}")
        self.transport = transport
        self.trust_store = trust_store
        self.mismatch_policy = mismatch_policy
        self.chunk_size = chunk_size
        self.max_redirects = max_redirects
        self.timeout = timeout

    # --- public API ---

    async def get(self, url: str) -> GeminiResponse:
        """
        Fetch url, following at most `max_redirects` redirects.
        Raises a GeminiError subclass on failure, asyncio.CancelledError when
        cancelled and TimeoutError when `timeout` expires.
        """
        ctx = RequestContext.from_url(url)  # scheme checked before any network activity
        async with asyncio.timeout(self.timeout):
            while True:
                outcome = await self._attempt(ctx)
                if isinstance(outcome, GeminiResponse):
                    return outcome
                ctx = outcome

    def forget_host(self, host: str) -> None:
        """Drop the pinned certificate for host so the next contact re-pins it."""
        self.trust_store.delete(host)
        LOG.info("tofu.forgotten", extra={"extra": {"host": host}})

    # --- one hop ---

    def _connection_for(self, ctx: RequestContext) -> GeminiConnection:
        return GeminiConnection(
            ctx.host,
            ctx.port,
            transport=self.transport,
            trust_store=self.trust_store,
            mismatch_policy=self.mismatch_policy,
        )

    async def _attempt(self, ctx: RequestContext) -> GeminiResponse | RequestContext:
        """Run one connection. Returns the response, or the next hop on a redirect."""
        conn = self._connection_for(ctx)
        LOG.info("fetch.attempt", extra={"extra": {"url": ctx.url, "depth": ctx.redirects}})
        try:
            await conn.open()
            await conn.send(build_request_line(ctx.url))

            reader = ByteStreamBuffer(conn, self.chunk_size)
            status, meta = parse_header(await reader.read_line())
            category = classify(status)
            LOG.info(
                "fetch.header",
                extra={"extra": {"url": ctx.url, "status": status, "category": category.value}},
            )

            if category is StatusCategory.REDIRECT:
                conn.begin_redirect()
                return resolve_redirect(ctx, meta, max_redirects=self.max_redirects)

            body = b""
            if category is StatusCategory.SUCCESS:
                conn.begin_body()
                body = await reader.read_body_until_close()
            return GeminiResponse(status=status, meta=meta, body=body, url=ctx.url)

        except asyncio.CancelledError:
            await conn.cancel()
            raise
        except GeminiError as e:
            if not conn.fail(e) and conn.state is ConnectionState.CANCELLED:
                # the transport broke because we cancelled it; report the cancel
                raise asyncio.CancelledError(f"fetch of {ctx.url} was cancelled") from e
            raise
        finally:
            await conn.close()
