# sponge/crawler/link_extractor.py
"""
Link extraction for Sponge documents.
"""
from __future__ import annotations

from typing import Set
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from sponge.crawler.models import FetchResponse
from sponge.errors import InvalidUri
from sponge.logger import logger
from sponge.uri import CanonicalUri, resolve


def extract_links(response: FetchResponse) -> Set[CanonicalUri]:
    """
    Extract every ``a[href]`` of a document as a set of canonical URIs.

    Links are resolved against ``<base href>`` when present, otherwise against
    the URI the document was served from. Links that cannot be canonicalized
    (mailto:, javascript:, broken authorities) are logged and dropped.
    """
    soup = BeautifulSoup(response.body or "", "html.parser")
    base = str(response.resolved_uri)
    base_tag = soup.find("base", href=True)
    if isinstance(base_tag, Tag) and isinstance(base_tag.get("href"), str):
        base = urljoin(base, base_tag["href"].strip())  # type: ignore[union-attr]

    links: Set[CanonicalUri] = set()
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw:
            continue
        try:
            links.add(resolve(base, raw))
        except InvalidUri as exc:
            logger.debug("URI parsing failed for %s: %s", raw, exc.reason)
    return links
