"""
Provider feed client.

Builds `{base}{key}/{path}` URLs, fetches with a timeout (no automatic retries),
transparently gunzips bodies by magic bytes, and parses JSON or XML into a
generic tree. Every call, success or failure, is reported to the optional
HttpCallSink; the key is only ever logged or recorded redacted.
"""

from __future__ import annotations

import gzip
import json
import logging
import time
import zlib
from typing import Any, Dict, Optional, Protocol
from urllib.parse import quote

import httpx

from core.config import Settings, get_settings
from core.errors import BODY_SNIPPET_LIMIT, FeedConfigError, FeedMalformed, FeedUnavailable
from ops.ops_events import log_feed_fetch

from .xml_tree import parse_xml

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
REDACTED = "***"


class HttpCallSink(Protocol):
    """Receiver for per-call audit records (implemented by the job context)."""

    async def record_http_call(
        self,
        *,
        provider: str,
        url: str,
        method: str,
        status_code: Optional[int],
        duration_ms: int,
        bytes_in: int,
        error: Optional[str] = None,
    ) -> None:
        ...


def decode_body(raw: bytes) -> str:
    """Gunzip when the body starts with the gzip magic bytes, then decode UTF-8."""
    if raw[:2] == GZIP_MAGIC:
        raw = gzip.decompress(raw)
    return raw.decode("utf-8")


class FeedClient:
    """Async HTTP client for the provider feed. Use as an async context manager."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=self._settings.feed_timeout_seconds,
            follow_redirects=True,
        )

    @property
    def provider(self) -> str:
        return self._settings.feed_provider

    async def __aenter__(self) -> "FeedClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_url(self, path: str, params: Optional[Dict[str, str]] = None) -> str:
        key = self._settings.feed_key
        if not key:
            raise FeedConfigError("Feed key is not configured (FEED_KEY)")
        base = self._settings.feed_base_url
        if not base.endswith("/"):
            base += "/"
        url = httpx.URL(f"{base}{key}/{path.lstrip('/')}", params=params or None)
        return str(url)

    def redact(self, url: str) -> str:
        """Replace the feed key (raw or percent-encoded) with ***."""
        key = self._settings.feed_key
        if not key:
            return url
        return url.replace(key, REDACTED).replace(quote(key, safe=""), REDACTED)

    async def fetch(
        self,
        path: str,
        ctx: Optional[HttpCallSink] = None,
        *,
        fmt: str = "json",
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        """GET a feed resource and return the parsed tree.

        fmt is "json" (adds json=1) or "xml". Raises FeedConfigError,
        FeedUnavailable or FeedMalformed.
        """
        query: Dict[str, str] = dict(params or {})
        if fmt == "json":
            query["json"] = "1"
        url = self.build_url(path, query)
        redacted = self.redact(url)

        started = time.perf_counter()
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            duration_ms = int((time.perf_counter() - started) * 1000)
            detail = f"{type(exc).__name__}: {self.redact(str(exc))}"
            await self._report(ctx, redacted, None, duration_ms, 0, detail)
            raise FeedUnavailable(None, detail, redacted) from exc

        raw = response.content
        duration_ms = int((time.perf_counter() - started) * 1000)

        if response.status_code != 200:
            snippet = self._snippet(raw)
            await self._report(
                ctx, redacted, response.status_code, duration_ms, len(raw), f"HTTP {response.status_code}"
            )
            raise FeedUnavailable(response.status_code, snippet, redacted)

        try:
            text = decode_body(raw)
        except (OSError, EOFError, zlib.error, UnicodeDecodeError) as exc:
            await self._report(ctx, redacted, response.status_code, duration_ms, len(raw), "undecodable body")
            raise FeedMalformed(f"undecodable body: {exc}", redacted) from exc

        try:
            tree = json.loads(text) if fmt == "json" else parse_xml(text)
        except ValueError as exc:
            await self._report(ctx, redacted, response.status_code, duration_ms, len(raw), f"unparsable {fmt}")
            raise FeedMalformed(f"unparsable {fmt}: {exc}", redacted) from exc

        await self._report(ctx, redacted, response.status_code, duration_ms, len(raw), None)
        return tree

    def _snippet(self, raw: bytes) -> str:
        try:
            text = decode_body(raw)
        except (OSError, EOFError, zlib.error, UnicodeDecodeError):
            text = raw[:BODY_SNIPPET_LIMIT].decode("utf-8", errors="replace")
        return self.redact(text[:BODY_SNIPPET_LIMIT])

    async def _report(
        self,
        ctx: Optional[HttpCallSink],
        url: str,
        status_code: Optional[int],
        duration_ms: int,
        bytes_in: int,
        error: Optional[str],
    ) -> None:
        log_feed_fetch(url, status_code, duration_ms, bytes_in, error)
        if ctx is None:
            return
        await ctx.record_http_call(
            provider=self.provider,
            url=url,
            method="GET",
            status_code=status_code,
            duration_ms=duration_ms,
            bytes_in=bytes_in,
            error=error,
        )
