# === FILE: sponge/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Set, Tuple

from sponge.classifier import ResourceKind, classify, matches_extension
from sponge.config import SpongeConfig
from sponge.crawler.downloader import DownloadGate
from sponge.crawler.link_extractor import extract_links
from sponge.crawler.models import FetchResponse, SpongeService
from sponge.errors import FetchFailure
from sponge.logger import LOGGER_NAME
from sponge.report import CrawlReport
from sponge.uri import CanonicalUri, has_valid_host

__all__ = ("VisitState", "Sponge")

Children = FrozenSet[CanonicalUri]


@dataclass
class VisitState:
    """
    Общее состояние обхода: кэш дочерних ссылок, упавшие URI и счётчик запросов.

    Все методы синхронные и вызываются только из цикла событий, поэтому
    каждая проверка-с-изменением выполняется атомарно.
    """

    max_uris: int
    dedup_cache: Dict[CanonicalUri, Children] = field(default_factory=dict)
    failed_uris: Set[CanonicalUri] = field(default_factory=set)
    visited_count: int = 0
    _pending: Dict[CanonicalUri, "asyncio.Future[Optional[Children]]"] = field(
        default_factory=dict, init=False, repr=False
    )
    _expanded: Dict[CanonicalUri, int] = field(default_factory=dict, init=False, repr=False)

    def claim(
        self, uri: CanonicalUri, depth: int
    ) -> Optional[Tuple[bool, "asyncio.Future[Optional[Children]]"]]:
        """
        Register a visit of *uri* at *depth*.

        Returns ``None`` when there is nothing to do: the URI failed, was
        already handled at this depth or shallower, or the fetch budget is
        spent. Otherwise returns ``(owner, future)``: the owner fetches the
        URI and resolves the future with its children, the others wait on it.
        """
        if uri in self.failed_uris:
            return None
        expanded = self._expanded.get(uri)
        if expanded is not None and expanded <= depth:
            return None

        pending = self._pending.get(uri)
        owner = pending is None
        if pending is None:
            if self.visited_count >= self.max_uris:
                return None
            self.visited_count += 1
            pending = asyncio.get_running_loop().create_future()
            self._pending[uri] = pending

        self._expanded[uri] = depth
        return owner, pending

    def cache(self, uri: CanonicalUri, children: Children) -> bool:
        """Store *children* for *uri*; False if they were already cached."""
        if uri in self.dedup_cache:
            return False
        self.dedup_cache[uri] = children
        return True

    def fail(self, uri: CanonicalUri) -> None:
        self.failed_uris.add(uri)


class Sponge:
    """Рекурсивный асинхронный обход сайта с ограничением глубины, хостов и числа запросов."""

    def __init__(self, service: SpongeService, config: SpongeConfig) -> None:
        self.service = service
        self.config = config
        self.state = VisitState(max_uris=config.max_uris)
        self.gate = DownloadGate(service, config.output_directory, config.concurrent_downloads)
        self.logger = logging.getLogger(LOGGER_NAME)
        self._fetch_pool = asyncio.Semaphore(config.concurrent_requests)
        self._duration = 0.0

    async def execute(self) -> None:
        """Create the output directory and crawl from the root URI until the graph is exhausted."""
        # the only fatal error of a run: OSError propagates to the caller
        self.config.output_directory.mkdir(parents=True, exist_ok=True)

        self.logger.info("Старт обхода: %s", self.config.uri)
        start = time.monotonic()
        await self.visit(self.config.uri)
        self._duration = time.monotonic() - start
        self.logger.info(
            "Завершено: %d URI за %.2f с, загружено файлов: %d, ошибок: %d",
            self.state.visited_count,
            self._duration,
            len(self.gate.downloaded),
            len(self.state.failed_uris),
        )

    async def visit(self, uri: CanonicalUri, depth: int = 0) -> None:
        """Visit *uri* and, within depth, every child; returns when all of them are done."""
        claim = self.state.claim(uri, depth)
        if claim is None:
            return
        owner, pending = claim

        if owner:
            kind = ResourceKind.IGNORED
            try:
                kind, children = await self._process(uri)
                pending.set_result(children)
            finally:
                # followers must never wait forever on an owner that blew up
                if not pending.done():
                    pending.set_result(None)
            if kind is ResourceKind.DOWNLOADABLE:
                await self._download(uri)
                return
        else:
            children = await pending

        if children and depth < self.config.max_depth:
            await asyncio.gather(*(self.visit(child, depth + 1) for child in sorted(children)))

    async def _process(self, uri: CanonicalUri) -> Tuple[ResourceKind, Optional[Children]]:
        """Fetch and classify *uri*; any error is logged and marks only this URI as failed."""
        try:
            async with self._fetch_pool:
                response = await self.service.fetch(uri)
            kind = self._classify(uri, response)
            if kind is ResourceKind.DOCUMENT:
                return kind, self._cache_children(uri, response)
            return kind, None
        except FetchFailure as exc:
            self.logger.warning("⚠ Обработка не удалась для %s: %s", uri, exc.reason)
        except Exception as exc:
            self.logger.exception("⚠ Обработка не удалась для %s: %s", uri, exc)
        self.state.fail(uri)
        return ResourceKind.IGNORED, None

    def _classify(self, uri: CanonicalUri, response: FetchResponse) -> ResourceKind:
        kind = classify(response.content_type, self.config.mime_types)
        if kind is ResourceKind.IGNORED and matches_extension(uri, self.config.file_extensions):
            return ResourceKind.DOWNLOADABLE
        return kind

    def _cache_children(self, uri: CanonicalUri, response: FetchResponse) -> Children:
        cached = self.state.dedup_cache.get(uri)
        if cached is not None:
            return cached
        children = frozenset(
            link for link in extract_links(response) if has_valid_host(link, self.config)
        )
        if self.state.cache(uri, children):
            self.logger.info("﹫ %s", uri)
        return children

    async def _download(self, uri: CanonicalUri) -> None:
        try:
            await self.gate.submit(uri)
        except Exception as exc:
            self.logger.exception("Download failed for %s: %s", uri, exc)

    def report(self) -> CrawlReport:
        """Summary of the run, built from the visit state and the download gate."""
        return CrawlReport(
            root=str(self.config.uri),
            visited=self.state.visited_count,
            documents=sorted(str(uri) for uri in self.state.dedup_cache),
            downloads=[str(path) for path in self.gate.downloaded],
            failed=sorted(str(uri) for uri in self.state.failed_uris),
            failed_downloads={str(uri): reason for uri, reason in self.gate.failed.items()},
            skipped_downloads=[str(uri) for uri in self.gate.skipped],
            duration_seconds=round(self._duration, 3),
        )
