# === FILE: sponge/engine.py ===
"""
Обёртка для запуска обхода: связывает HTTP-транспорт и оркестратор.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from sponge.config import SpongeConfig
from sponge.crawler.crawler import Sponge
from sponge.crawler.fetcher import Fetcher
from sponge.crawler.models import SpongeService
from sponge.report import CrawlReport


def prepare_output(config: SpongeConfig) -> Path:
    """Создаёт каталог для загрузок; OSError означает, что обход начинать нельзя."""
    config.output_directory.mkdir(parents=True, exist_ok=True)
    return config.output_directory


async def run_crawl(config: SpongeConfig, service: Optional[SpongeService] = None) -> CrawlReport:
    """
    Запускает обход и возвращает итоговый отчёт.

    Parameters
    ----------
    config : SpongeConfig
        Конфигурация обхода.
    service : SpongeService, optional
        Транспорт; по умолчанию aiohttp :class:`Fetcher` с собственной сессией.

    Raises
    ------
    OSError
        Если каталог для загрузок не может быть создан.
    """
    if service is not None:
        sponge = Sponge(service, config)
        await sponge.execute()
        return sponge.report()

    async with Fetcher(config) as fetcher:
        sponge = Sponge(fetcher, config)
        await sponge.execute()
    return sponge.report()


def crawl_site(config: SpongeConfig, service: Optional[SpongeService] = None) -> CrawlReport:
    """Синхронный запуск обхода в собственном цикле событий."""
    return asyncio.run(run_crawl(config, service))


def execute(config: SpongeConfig, service: Optional[SpongeService] = None) -> None:
    """Синхронная точка входа: обойти сайт и ничего не возвращать."""
    crawl_site(config, service)


__all__ = ["prepare_output", "run_crawl", "crawl_site", "execute"]
