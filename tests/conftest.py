# File: tests/conftest.py
from __future__ import annotations

import asyncio
from collections import Counter
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import pytest

from sponge.config import SpongeConfig
from sponge.crawler.models import FetchResponse
from sponge.errors import DownloadFailure, FetchFailure
from sponge.logger import init_logging
from sponge.uri import CanonicalUri

ROOT = "https://www.test.com"


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


def html(*hrefs: str) -> str:
    links = "".join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<html><body>{links}</body></html>"


Route = Union[FetchResponse, Exception, str]


class FakeService:
    """
    In-memory replacement for the HTTP transport.

    ``routes`` maps a canonical URI string to a Content-Type (non-document),
    a FetchResponse or an exception to raise. ``pages`` maps a URI to the HTML
    served as ``text/html``. Unknown URIs fail like a 404.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.routes: Dict[str, Route] = {}
        self.delays: Dict[str, float] = {}
        self.download_errors: Dict[str, Exception] = {}
        self.delay = delay
        self.fetches: Counter[str] = Counter()
        self.downloads: List[tuple[str, Path]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.downloads_in_flight = 0
        self.max_downloads_in_flight = 0

    def page(self, uri: str, *hrefs: str) -> None:
        canonical = CanonicalUri.parse(uri)
        self.routes[str(canonical)] = FetchResponse("text/html; charset=utf-8", html(*hrefs), canonical)

    def resource(self, uri: str, content_type: str) -> None:
        self.routes[str(CanonicalUri.parse(uri))] = content_type

    def failure(self, uri: str, exc: Optional[Exception] = None) -> None:
        self.routes[str(CanonicalUri.parse(uri))] = exc or FetchFailure(uri, "HTTP 500")

    async def fetch(self, uri: CanonicalUri) -> FetchResponse:
        key = str(uri)
        self.fetches[key] += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(key, self.delay))
        finally:
            self.in_flight -= 1
        route = self.routes.get(key)
        if route is None:
            raise FetchFailure(uri, "HTTP 404")
        if isinstance(route, Exception):
            raise route
        if isinstance(route, str):
            return FetchResponse(route, None, uri)
        return route

    async def download(self, uri: CanonicalUri, path: Path) -> None:
        self.downloads.append((str(uri), path))
        self.downloads_in_flight += 1
        self.max_downloads_in_flight = max(self.max_downloads_in_flight, self.downloads_in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.downloads_in_flight -= 1
        error = self.download_errors.get(str(uri))
        if error is not None:
            raise error
        path.write_bytes(f"content of {uri}".encode())


@pytest.fixture()
def service() -> FakeService:
    return FakeService()


@pytest.fixture()
def output_dir(tmp_path) -> Path:
    return tmp_path / "output"


@pytest.fixture()
def make_config(output_dir) -> Callable[..., SpongeConfig]:
    """Return a factory for SpongeConfig with test defaults."""

    def factory(**overrides) -> SpongeConfig:
        data = {
            "uri": ROOT,
            "output_directory": output_dir,
            "mime_types": ["text/plain"],
            "max_depth": 1,
            "concurrent_requests": 4,
            "concurrent_downloads": 2,
        }
        data.update(overrides)
        return SpongeConfig(**data)

    return factory


@pytest.fixture()
def download_error() -> DownloadFailure:
    return DownloadFailure("https://test.com/file.txt", "HTTP 503")


@pytest.fixture()
def make_service() -> Callable[..., FakeService]:
    """Factory for transports that need a delay or several instances."""
    return FakeService


@pytest.fixture(autouse=True)
def reset_logging():
    """CliRunner swaps stdout; give every test a handler bound to the current stream."""
    init_logging()
    yield
    init_logging()
