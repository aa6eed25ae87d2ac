# sponge/crawler/downloader.py
"""
Download gate: moves accepted resources into the output directory.

A resource is written at most once and only when its file is absent.
Transfers run on their own semaphore so large files never hold the slots
used for link discovery.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, List, Optional

from sponge.crawler.models import SpongeService
from sponge.errors import DownloadFailure
from sponge.logger import logger
from sponge.uri import CanonicalUri


class DownloadGate:
    """
    Saves downloadable resources under ``output_directory``.

    The file name is the unescaped last path segment of the URI. Within one
    run a name belongs to the first URI that asked for it; other URIs that
    map to the same name are skipped and logged instead of overwriting it.
    """

    def __init__(self, service: SpongeService, output_directory: Path, concurrency: int = 1) -> None:
        self._service = service
        self.output_directory = Path(output_directory).absolute()
        self._semaphore = asyncio.Semaphore(concurrency)
        self._owners: Dict[str, CanonicalUri] = {}

        self.downloaded: List[Path] = []
        self.skipped: List[CanonicalUri] = []
        self.failed: Dict[CanonicalUri, str] = {}

    @staticmethod
    def file_name(uri: CanonicalUri) -> Optional[str]:
        name = uri.last_segment.replace("/", "_").replace("\\", "_")
        if name in ("", ".", ".."):
            return None
        return name

    def destination(self, uri: CanonicalUri) -> Optional[Path]:
        name = self.file_name(uri)
        return None if name is None else self.output_directory / name

    async def submit(self, uri: CanonicalUri) -> Optional[Path]:
        """Download *uri* unless its destination is taken; never raises DownloadFailure."""
        path = self.destination(uri)
        if path is None:
            logger.debug("No file name in %s, skipping download", uri)
            self.skipped.append(uri)
            return None

        owner = self._owners.setdefault(path.name, uri)
        if owner != uri:
            logger.info("Skipping %s: %s is already taken by %s", uri, path.name, owner)
            self.skipped.append(uri)
            return None

        if path.exists():
            logger.debug("%s already exists, skipping %s", path, uri)
            self.skipped.append(uri)
            return None

        async with self._semaphore:
            try:
                await self._service.download(uri, path)
            except DownloadFailure as exc:
                logger.warning("Download failed for %s: %s", uri, exc.reason)
                self.failed[uri] = exc.reason
                return None

        logger.info("Downloaded %s -> %s", uri, path)
        self.downloaded.append(path)
        return path
