"""
sponge.crawler: orchestrator, download gate, link extraction and HTTP transport.
"""
from sponge.crawler.crawler import Sponge, VisitState
from sponge.crawler.downloader import DownloadGate
from sponge.crawler.fetcher import Fetcher
from sponge.crawler.models import FetchResponse, SpongeService

__all__ = ["Sponge", "VisitState", "DownloadGate", "Fetcher", "FetchResponse", "SpongeService"]
