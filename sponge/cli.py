# === FILE: sponge/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска краулера Sponge через командную строку.

Команды:
  crawl     Обойти сайт и загрузить подходящие файлы
  config    Показать итоговую конфигурацию

Общие опции:
  --config PATH              YAML/JSON файл с настройками (опции командной строки важнее)
  --uri, -u URI              Корневой URI
  --output, -o DIR           Каталог для загрузок
  --mime-type, -t TYPE       Разрешённый MIME-тип (можно повторять)
  --file-extension, -e EXT   Разрешённое расширение (можно повторять)
  --depth, -d INT            Максимальная глубина
  --max-uris, -m INT         Максимальное число запросов
  --include-subdomains, -s   Обходить поддомены (--no-include-subdomains отключает)
  --concurrent-requests, -R  Размер пула запросов
  --concurrent-downloads, -D Размер пула загрузок
  --log-level LEVEL          Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH            Файл для логов (stdout, если не указан)

Пример:
  sponge -u https://example.com -o downloads -t application/pdf -e zip -d 2 crawl --json report.json
"""
import sys
from pathlib import Path
from typing import Any, Dict, NoReturn

import click
from pydantic import ValidationError

from sponge import __version__
from sponge.config import SpongeConfig, build_config
from sponge.engine import crawl_site, prepare_output
from sponge.logger import init_logging
from sponge.report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str) -> NoReturn:
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _resolve_config(ctx: click.Context) -> SpongeConfig:
    try:
        return build_config(ctx.obj['config_path'], ctx.obj['overrides'])
    except ValidationError as e:
        print_error(f'Ошибка конфигурации:\n{e}')
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='Sponge, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option('--uri', '-u', 'uri', default=None, help='Корневой URI обхода.')
@click.option(
    '--output', '-o', 'output_directory',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог для загруженных файлов.'
)
@click.option('--mime-type', '-t', 'mime_types', multiple=True, help='Разрешённый MIME-тип.')
@click.option('--file-extension', '-e', 'file_extensions', multiple=True, help='Разрешённое расширение.')
@click.option('--depth', '-d', 'max_depth', type=int, default=None, help='Максимальная глубина обхода.')
@click.option('--max-uris', '-m', 'max_uris', type=int, default=None, help='Максимальное число запросов.')
@click.option('--include-subdomains/--no-include-subdomains', '-s', 'include_subdomains',
              default=None, help='Обходить поддомены (по умолчанию из конфигурации).')
@click.option('--concurrent-requests', '-R', 'concurrent_requests', type=int, default=None,
              help='Число одновременных запросов.')
@click.option('--concurrent-downloads', '-D', 'concurrent_downloads', type=int, default=None,
              help='Число одновременных загрузок.')
@click.option('--timeout', 'timeout', type=float, default=None, help='Таймаут запроса (секунд).')
@click.option('--user-agent', 'user_agent', default=None, help='Заголовок User-Agent.')
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, **options):
    """Sponge: обход сайта и загрузка файлов подходящих типов."""
    init_logging(level=log_level, log_file=str(log_file) if log_file else None)
    overrides: Dict[str, Any] = {
        key: value for key, value in options.items() if value is not None and value != ()
    }
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path
    ctx.obj['overrides'] = overrides


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.pass_context
def crawl(ctx, json_output):
    """Запустить обход и загрузку файлов."""
    cfg = _resolve_config(ctx)
    click.echo(f'Starting crawl of {cfg.uri}')
    try:
        prepare_output(cfg)
    except OSError as e:
        print_error(f'Не удалось создать каталог {cfg.output_directory}: {e}')

    try:
        report = crawl_site(cfg)
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    click.echo(report.summary())

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать итоговую конфигурацию в JSON."""
    cfg = _resolve_config(ctx)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
