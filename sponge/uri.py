# File: sponge/uri.py
"""
URI canonicalization for Sponge.

Every link found on a page is reduced to a :class:`CanonicalUri` before it
takes part in deduplication or host filtering. Two raw strings that denote
the same resource canonicalize to equal values:

* scheme must be ``http`` or ``https``, the host must be non-empty;
* the host is lower-cased and a leading ``www.`` is stripped;
* every path segment is percent-escaped on its own (unescape, then escape,
  so an already escaped segment is never escaped twice);
* ``.`` and ``..`` segments are removed, an empty path becomes ``/``;
* a non-empty query is kept verbatim, the fragment is dropped.
"""
from __future__ import annotations

import functools
import posixpath
from typing import TYPE_CHECKING, List
from urllib.parse import SplitResult, quote, unquote, urljoin, urlsplit, urlunsplit

from sponge.errors import InvalidUri

if TYPE_CHECKING:  # pragma: no cover
    from sponge.config import SpongeConfig

__all__ = ("CanonicalUri", "canonicalize", "resolve", "has_valid_host", "remove_dot_segments")

SUPPORTED_SCHEMES = frozenset({"http", "https"})
WWW_PREFIX = "www."

# RFC 3986 pchar without "%": unreserved characters are always kept by quote()
_SEGMENT_SAFE = "!$&'()*+,;=:@"


def _escape_segment(segment: str) -> str:
    return quote(unquote(segment), safe=_SEGMENT_SAFE)


def remove_dot_segments(path: str) -> str:
    """Remove ``.`` and ``..`` segments from an absolute path (RFC 3986, 5.2.4)."""
    output: List[str] = []
    segments = path.split("/")[1:]
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        if segment == ".":
            if last:
                output.append("")
        elif segment == "..":
            if output:
                output.pop()
            if last:
                output.append("")
        else:
            output.append(segment)
    return "/" + "/".join(output)


def _split(raw: str) -> SplitResult:
    try:
        parts = urlsplit(raw)
        # .port validates the authority and raises ValueError for garbage
        parts.port
    except ValueError as exc:
        raise InvalidUri(raw, str(exc)) from exc
    return parts


def _build(raw: str) -> str:
    parts = _split(raw.strip())

    scheme = parts.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise InvalidUri(raw, f"Unsupported scheme '{parts.scheme}'")

    host = parts.hostname or ""
    if host.startswith(WWW_PREFIX):
        host = host[len(WWW_PREFIX):]
    if not host:
        raise InvalidUri(raw, "Hostname cannot be empty")
    if ":" in host:
        host = f"[{host}]"

    netloc = host
    if "@" in parts.netloc:
        netloc = f"{parts.netloc.rpartition('@')[0]}@{netloc}"
    if parts.port is not None:
        netloc = f"{netloc}:{parts.port}"

    path = "/".join(_escape_segment(segment) for segment in parts.path.split("/"))
    path = remove_dot_segments(path if path.startswith("/") else "/" + path)

    return urlunsplit((scheme, netloc, path, parts.query, ""))


@functools.total_ordering
class CanonicalUri:
    """Normalized URI used as the only identity key of a crawl.

    Equality, ordering and hashing are defined on the normalized string.
    Build instances with :meth:`parse`; the constructor trusts its input.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str) -> None:
        self._value = value

    @classmethod
    def parse(cls, raw: "str | CanonicalUri") -> CanonicalUri:
        if isinstance(raw, CanonicalUri):
            return raw
        return cls(_build(str(raw)))

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"CanonicalUri({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CanonicalUri):
            return self._value == other._value
        return NotImplemented

    def __lt__(self, other: CanonicalUri) -> bool:
        if isinstance(other, CanonicalUri):
            return self._value < other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    @property
    def host(self) -> str:
        return urlsplit(self._value).hostname or ""

    @property
    def path(self) -> str:
        return urlsplit(self._value).path

    @property
    def last_segment(self) -> str:
        """Unescaped last path segment, ``""`` for directory-like URIs."""
        return unquote(self.path.rsplit("/", 1)[-1])

    @property
    def extension(self) -> str:
        """Lower-cased extension of :attr:`last_segment` without the dot."""
        return posixpath.splitext(self.last_segment)[1].lstrip(".").lower()


def canonicalize(raw: str) -> CanonicalUri:
    """Shortcut for :meth:`CanonicalUri.parse`."""
    return CanonicalUri.parse(raw)


def resolve(base: "str | CanonicalUri", href: str) -> CanonicalUri:
    """Resolve *href* against the page it was found on and canonicalize it."""
    return CanonicalUri.parse(urljoin(str(base), href.strip()))


def has_valid_host(candidate: CanonicalUri, config: SpongeConfig) -> bool:
    """True if *candidate* stays inside the crawl scope of *config*."""
    root_host = config.uri.host
    host = candidate.host
    if host == root_host:
        return True
    return config.include_subdomains and host.endswith("." + root_host)
