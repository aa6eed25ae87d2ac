# File: sponge/report.py
"""sponge.report: Итоговый отчёт об обходе и его сохранение в JSON."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union


@dataclass(slots=True)
class CrawlReport:
    """Результаты обхода: число запросов, документы, загрузки и ошибки."""

    root: str
    visited: int = 0
    documents: List[str] = field(default_factory=list)
    downloads: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    failed_downloads: Dict[str, str] = field(default_factory=dict)
    skipped_downloads: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.as_dict(), ensure_ascii=False, indent=2 if pretty else None)

    def summary(self) -> str:
        return (
            f"{self.visited} URIs visited, {len(self.documents)} documents, "
            f"{len(self.downloads)} files downloaded, {len(self.failed)} failed"
        )


def render_json(report: CrawlReport, output_path: Union[Path, str], *, pretty: bool = True) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект CrawlReport
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report.json(pretty=pretty), encoding="utf-8")
    return output


__all__ = ["CrawlReport", "render_json"]
