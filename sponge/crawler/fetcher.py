# sponge/crawler/fetcher.py
"""
Fetcher module: HTTP transport of Sponge built on aiohttp.

``fetch`` requests a URI and returns its Content-Type, the body for HTML
documents only and the URI after redirects. ``download`` streams a resource
into a file. Both turn every transport problem into a Sponge error so the
orchestrator only has to deal with :class:`FetchFailure` and
:class:`DownloadFailure`.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Sequence

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from sponge.classifier import HTML_MIME_TYPES, mime_type
from sponge.config import SpongeConfig
from sponge.crawler.models import FetchResponse
from sponge.errors import DownloadFailure, FetchFailure, InvalidUri
from sponge.logger import logger
from sponge.uri import CanonicalUri

_CHUNK_SIZE = 64 * 1024


class Fetcher:
    """Handles HTTP fetching with retries/backoff and timeout."""

    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(self, config: SpongeConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent, "Referer": self.config.referrer},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def _session(self) -> ClientSession:
        if not self.session:
            raise RuntimeError("Session not initialized")
        return self.session

    @staticmethod
    def _resolved(uri: CanonicalUri, resp: ClientResponse) -> CanonicalUri:
        try:
            return CanonicalUri.parse(str(resp.url))
        except InvalidUri:
            return uri

    async def _read(self, uri: CanonicalUri, resp: ClientResponse) -> FetchResponse:
        if resp.status >= 400:
            raise FetchFailure(uri, f"HTTP {resp.status}")
        content_type = resp.headers.get("Content-Type", "")
        body: Optional[str] = None
        if mime_type(content_type) in HTML_MIME_TYPES:
            body = await resp.text(errors="replace")
        return FetchResponse(content_type, body, self._resolved(uri, resp))

    async def fetch(self, uri: CanonicalUri) -> FetchResponse:
        """
        Request *uri* following redirects.

        Only 5xx and 429 answers are retried, with exponential backoff up to
        ``retry_times``. Timeouts and connection errors fail at once.
        Raises FetchFailure.
        """
        session = self._session()
        attempts = 0
        while True:
            try:
                async with session.get(str(uri), allow_redirects=True) as resp:
                    if resp.status not in self._RETRY_STATUS:
                        return await self._read(uri, resp)
                    reason = f"HTTP {resp.status}"
            except asyncio.TimeoutError as exc:
                raise FetchFailure(uri, "timeout") from exc
            except ClientError as exc:
                raise FetchFailure(uri, str(exc) or type(exc).__name__) from exc

            attempts += 1
            if attempts > self.config.retry_times:
                raise FetchFailure(uri, reason)
            backoff = min(60.0, self.config.retry_backoff * 2**attempts)
            logger.debug(
                "Retry %d/%d for %s after %s, waiting %.2f s",
                attempts, self.config.retry_times, uri, reason, backoff,
            )
            await asyncio.sleep(backoff)

    async def download(self, uri: CanonicalUri, path: Path) -> None:
        """
        Stream *uri* into *path*.

        Bytes go to ``<name>.part`` first and are moved into place on success,
        a failed transfer leaves nothing behind. Raises DownloadFailure.
        """
        session = self._session()
        partial = path.with_name(path.name + ".part")
        # large files: bound the time between chunks, not the whole transfer
        timeout = ClientTimeout(total=None, sock_connect=self.config.timeout, sock_read=self.config.timeout)
        try:
            async with session.get(str(uri), allow_redirects=True, timeout=timeout) as resp:
                if resp.status >= 400:
                    raise DownloadFailure(uri, f"HTTP {resp.status}")
                with partial.open("wb") as fh:
                    async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
                        fh.write(chunk)
            partial.replace(path)
        except (ClientError, asyncio.TimeoutError, OSError) as exc:
            partial.unlink(missing_ok=True)
            raise DownloadFailure(uri, str(exc) or type(exc).__name__) from exc
