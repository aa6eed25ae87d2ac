# sponge/crawler/models.py
"""
Data models shared by the Sponge crawler and its transport.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from sponge.uri import CanonicalUri


@dataclass(slots=True, frozen=True)
class FetchResponse:
    """Result of one request: Content-Type, body (documents only) and the URI after redirects."""

    content_type: str
    body: Optional[str]
    resolved_uri: CanonicalUri


class SpongeService(Protocol):
    """What the orchestrator needs from the network layer."""

    async def fetch(self, uri: CanonicalUri) -> FetchResponse:
        ...

    async def download(self, uri: CanonicalUri, path: Path) -> None:
        ...
