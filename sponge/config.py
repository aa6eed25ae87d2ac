# === FILE: sponge/config.py ===
"""
Модуль для загрузки и валидации конфигурации краулера Sponge.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from sponge.uri import CanonicalUri

DEFAULT_MAXIMUM_DEPTH = 1
DEFAULT_MAXIMUM_URIS = 1_000_000
DEFAULT_CONCURRENT_REQUESTS = 1
DEFAULT_CONCURRENT_DOWNLOADS = 1
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; Sponge/0.1; +https://github.com/spypunk/sponge)"
DEFAULT_REFERRER = "https://www.google.com"


def _as_items(value: Any) -> Iterable[str]:
    if value is None:
        return ()
    if isinstance(value, str):
        return value.split(",")
    return value


class SpongeConfig(BaseModel):
    """Конфигурация для одного запуска обхода."""
    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    uri: CanonicalUri = Field(..., description="Корневой URI обхода.")
    output_directory: Path = Field(..., description="Каталог для загруженных файлов.")
    mime_types: FrozenSet[str] = Field(default_factory=frozenset, description="Разрешённые MIME-типы.")
    file_extensions: FrozenSet[str] = Field(
        default_factory=frozenset, description="Разрешённые расширения файлов."
    )
    max_depth: int = Field(DEFAULT_MAXIMUM_DEPTH, ge=0, description="Максимальная глубина обхода ссылок.")
    max_uris: int = Field(DEFAULT_MAXIMUM_URIS, ge=1, description="Жесткий лимит по числу запросов.")
    include_subdomains: bool = Field(False, description="Обходить ли поддомены корневого хоста.")
    concurrent_requests: int = Field(DEFAULT_CONCURRENT_REQUESTS, ge=1, description="Размер пула запросов.")
    concurrent_downloads: int = Field(
        DEFAULT_CONCURRENT_DOWNLOADS, ge=1, description="Размер пула загрузок."
    )
    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    referrer: str = Field(DEFAULT_REFERRER, description="Заголовок Referer.")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток при 5xx/429.")
    retry_backoff: float = Field(0.5, ge=0, description="Базовая пауза между попытками (секунд).")

    @field_validator("uri", mode="before")
    def _canonical_uri(cls, v: Any) -> CanonicalUri:
        # InvalidUri is a ValueError, pydantic reports it as a validation error
        return CanonicalUri.parse(v)

    @field_validator("mime_types", mode="before")
    def _normalize_mime_types(cls, v: Any) -> FrozenSet[str]:
        return frozenset(item.strip().lower() for item in _as_items(v) if item.strip())

    @field_validator("file_extensions", mode="before")
    def _normalize_extensions(cls, v: Any) -> FrozenSet[str]:
        return frozenset(
            item.strip().lstrip(".").lower() for item in _as_items(v) if item.strip().lstrip(".")
        )

    @model_validator(mode="after")
    def _check_accepted_types(self) -> SpongeConfig:
        if not self.mime_types and not self.file_extensions:
            raise ValueError("at least one MIME type or file extension is required")
        return self

    @field_serializer("uri")
    def _serialize_uri(self, uri: CanonicalUri) -> str:
        return str(uri)

    @field_serializer("mime_types", "file_extensions")
    def _serialize_set(self, items: FrozenSet[str]) -> List[str]:
        return sorted(items)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Читает YAML или JSON файл и возвращает словарь настроек без валидации."""
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path]) -> SpongeConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект SpongeConfig.
    При отсутствии файла бросает FileNotFoundError.
    """
    return SpongeConfig(**read_config_file(path))


def build_config(
    path: Union[str, Path, None] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> SpongeConfig:
    """Merge an optional config file with explicit overrides (overrides win)."""
    data: Dict[str, Any] = read_config_file(path) if path is not None else {}
    data.update(overrides or {})
    return SpongeConfig(**data)


__all__ = ["SpongeConfig", "load_config", "build_config", "read_config_file"]
