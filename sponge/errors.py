# File: sponge/errors.py
"""sponge.errors: Исключения, которыми обмениваются модули краулера."""

from __future__ import annotations

from typing import Any


class SpongeError(Exception):
    """Base class for every error raised by Sponge."""


class InvalidUri(SpongeError, ValueError):
    """Ссылка не может быть приведена к каноническому виду."""

    def __init__(self, uri: Any, reason: str) -> None:
        super().__init__(f"{reason}: {uri!s}")
        self.uri = uri
        self.reason = reason


class FetchFailure(SpongeError):
    """Transport or protocol error while requesting a URI."""

    def __init__(self, uri: Any, reason: str) -> None:
        super().__init__(f"{uri!s}: {reason}")
        self.uri = uri
        self.reason = reason


class DownloadFailure(SpongeError):
    """Ошибка при сохранении ресурса на диск."""

    def __init__(self, uri: Any, reason: str) -> None:
        super().__init__(f"{uri!s}: {reason}")
        self.uri = uri
        self.reason = reason


__all__ = ["SpongeError", "InvalidUri", "FetchFailure", "DownloadFailure"]
