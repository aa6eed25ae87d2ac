# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from sponge.config import SpongeConfig, build_config, load_config
from sponge.uri import CanonicalUri


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("uri: https://www.example.com\noutput_directory: out\nmime_types: [text/plain]", ".yaml", None),
        (
            json.dumps({"uri": "https://example.com", "output_directory": "out", "file_extensions": ["pdf"]}),
            ".json",
            None,
        ),
        ("{}", ".json", ValidationError),
        ("not: a: mapping", ".yaml", ValueError),
        ("- just\n- a list", ".yaml", TypeError),
        ("uri = 'x'", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, SpongeConfig)
        assert cfg.uri == CanonicalUri.parse("https://example.com/")


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_defaults(tmp_path):
    cfg = SpongeConfig(uri="https://example.com", output_directory=tmp_path, mime_types="text/plain")
    assert cfg.max_depth == 1
    assert cfg.max_uris == 1_000_000
    assert cfg.include_subdomains is False
    assert cfg.concurrent_requests == 1
    assert cfg.concurrent_downloads == 1


def test_accepted_types_are_normalized(tmp_path):
    cfg = SpongeConfig(
        uri="https://example.com",
        output_directory=tmp_path,
        mime_types=["Text/Plain ", "application/pdf"],
        file_extensions=".ZIP,tar.gz, ",
    )
    assert cfg.mime_types == frozenset({"text/plain", "application/pdf"})
    assert cfg.file_extensions == frozenset({"zip", "tar.gz"})


@pytest.mark.parametrize(
    "overrides",
    [
        {"uri": "ftp://example.com"},
        {"uri": "https://"},
        {"mime_types": [], "file_extensions": []},
        {"max_depth": -1},
        {"max_uris": 0},
        {"concurrent_requests": 0},
        {"concurrent_downloads": 0},
        {"unknown": True},
    ],
)
def test_invalid_values(tmp_path, overrides):
    data = {"uri": "https://example.com", "output_directory": tmp_path, "mime_types": ["text/plain"]}
    data.update(overrides)
    with pytest.raises(ValidationError):
        SpongeConfig(**data)


def test_config_is_frozen(tmp_path):
    cfg = SpongeConfig(uri="https://example.com", output_directory=tmp_path, mime_types=["text/plain"])
    with pytest.raises(ValidationError):
        cfg.max_depth = 5


def test_build_config_overrides_file(tmp_path):
    cfg_path = write_file(
        tmp_path, "uri: https://example.com\noutput_directory: out\nmime_types: [text/plain]\nmax_depth: 4", ".yml"
    )
    cfg = build_config(cfg_path, {"max_depth": 2, "include_subdomains": True})
    assert cfg.max_depth == 2
    assert cfg.include_subdomains is True
    assert cfg.mime_types == frozenset({"text/plain"})


def test_dump_is_json_friendly(tmp_path):
    cfg = SpongeConfig(
        uri="https://www.example.com/a/../b",
        output_directory=tmp_path,
        mime_types=["b/b", "a/a"],
    )
    data = json.loads(cfg.model_dump_json())
    assert data["uri"] == "https://example.com/b"
    assert data["mime_types"] == ["a/a", "b/b"]
