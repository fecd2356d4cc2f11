"""Tests for logger configuration."""

import io
from pathlib import Path

from loguru import logger as _logger

from feed_aggregator.logger import get_logger, setup_logger


def test_file_sink_receives_messages(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "aggregator.log"

    setup_logger(level="DEBUG", log_file=str(log_file), retention="1 day")
    get_logger("feed_aggregator.tests").debug("Cache check")

    # removing the sinks flushes the queued file writer
    _logger.remove()

    content = log_file.read_text(encoding="utf-8")
    assert "Cache check" in content
    assert "DEBUG" in content
    assert "feed_aggregator.tests" in content


def test_level_filters_console(monkeypatch) -> None:
    stream = io.StringIO()
    monkeypatch.setattr("sys.stderr", stream)

    setup_logger(level="WARNING")
    log = get_logger("feed_aggregator.tests")
    log.info("quiet")
    log.warning("loud")
    _logger.remove()

    output = stream.getvalue()
    assert "loud" in output
    assert "quiet" not in output
