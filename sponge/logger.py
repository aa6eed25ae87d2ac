# === FILE: sponge/logger.py ===
"""
Логирование Sponge: один именованный логгер для краулера, загрузчика и CLI.

Вывод всегда идёт в текущий stdout, файл логов с ротацией подключается
опцией ``--log-file``. Повторный вызов :func:`init_logging` заменяет
обработчики, а не добавляет новые.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union

LOGGER_NAME = "Sponge"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3


def _handlers(log_file: Optional[Union[str, Path]]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                str(log_file),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def init_logging(
    level: Union[int, str] = "INFO", log_file: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """Настраивает логгер ``Sponge`` и возвращает его."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for old in list(lg.handlers):
        lg.removeHandler(old)
        old.close()
    for handler in _handlers(log_file):
        lg.addHandler(handler)
    # root logger handlers stay out of crawl output
    lg.propagate = False
    return lg


logger: logging.Logger = init_logging()

__all__ = ["LOGGER_NAME", "logger", "init_logging"]
