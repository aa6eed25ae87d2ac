# File: sponge/classifier.py
"""sponge.classifier: Решение, что делать с ответом по его Content-Type."""

from __future__ import annotations

from enum import Enum
from typing import AbstractSet, Optional

from sponge.uri import CanonicalUri

__all__ = ["ResourceKind", "HTML_MIME_TYPES", "mime_type", "classify", "matches_extension"]

HTML_MIME_TYPES = frozenset({"text/html", "application/xhtml+xml"})


class ResourceKind(str, Enum):
    DOCUMENT = "document"
    DOWNLOADABLE = "downloadable"
    IGNORED = "ignored"


def mime_type(content_type: Optional[str]) -> str:
    """Return the MIME essence of a Content-Type header: no parameters, lower case."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def classify(content_type: Optional[str], accepted_types: AbstractSet[str]) -> ResourceKind:
    """Документ, если тип HTML/XHTML; ресурс для загрузки, если тип разрешён; иначе игнор."""
    mime = mime_type(content_type)
    if mime in HTML_MIME_TYPES:
        return ResourceKind.DOCUMENT
    if mime and mime in accepted_types:
        return ResourceKind.DOWNLOADABLE
    return ResourceKind.IGNORED


def matches_extension(uri: CanonicalUri, accepted_extensions: AbstractSet[str]) -> bool:
    """True if the last path segment of *uri* carries an accepted file extension."""
    extension = uri.extension
    return bool(extension) and extension in accepted_extensions
