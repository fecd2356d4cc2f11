"""Tests for the command line interface."""

from pathlib import Path

import pytest
from loguru import logger as _logger
from typer.testing import CliRunner

from conftest import make_item

from feed_aggregator.cli import cli
from feed_aggregator.core import CacheStore, Category

runner = CliRunner()

CONFIG = """
global:
  enabled_categories: [technology]
  output_dir: {root}/feeds
  docs_dir: {root}/docs
cache:
  path: {root}/cache.json
sources:
  - id: wire
    name: Wire
    type: rss
    base_url: https://wire.example
    categories:
      - category: technology
        endpoint: /tech.xml
        refresh_minutes: 60
"""


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    # sinks point at the runner's captured streams
    _logger.remove()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG.format(root=tmp_path.as_posix()), encoding="utf-8")
    return path


def test_check_exits_zero_without_cache(config_path: Path) -> None:
    result = runner.invoke(cli, ["check", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "Changes likely" in result.output


def test_check_exits_one_with_fresh_cache(tmp_path: Path, config_path: Path) -> None:
    cache = CacheStore(tmp_path / "cache.json")
    cache.update("wire", Category.TECHNOLOGY, [make_item("Fresh story", source="Wire")])
    cache.persist()

    result = runner.invoke(cli, ["check", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "No changes expected" in result.output


def test_stats_then_clear_cache(tmp_path: Path, config_path: Path) -> None:
    cache = CacheStore(tmp_path / "cache.json")
    cache.update("wire", Category.TECHNOLOGY, [make_item("Story A", source="Wire")])
    cache.persist()

    stats = runner.invoke(cli, ["stats", "--config", str(config_path)])
    assert stats.exit_code == 0
    assert "Cached Sources: 1" in stats.output
    assert "wire/technology: 1 items" in stats.output

    cleared = runner.invoke(cli, ["clear-cache", "--config", str(config_path)])
    assert cleared.exit_code == 0
    assert len(CacheStore(tmp_path / "cache.json")) == 0

    check = runner.invoke(cli, ["check", "--config", str(config_path)])
    assert check.exit_code == 0


def test_invalid_config_exits_two(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("sources: [\n", encoding="utf-8")

    result = runner.invoke(cli, ["check", "--config", str(path)])

    assert result.exit_code == 2
    assert "Configuration error" in result.output
