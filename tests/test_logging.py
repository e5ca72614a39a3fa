"""Tests for logging setup."""

import logging
import logging.handlers

import pytest

from clicktoplay.core.config import Settings
from clicktoplay.core.logging import (
    ColoredFormatter,
    ContextFilter,
    setup_logging,
    time_operation,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, filters, level = root.handlers[:], root.filters[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.filters = filters
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_setup_logging_with_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "clicktoplay.log"
    settings = Settings(
        data_dir=tmp_path / "data",
        env="test",
        logging={"level": "DEBUG", "file": str(log_file)}
    )

    root = setup_logging(settings, context={"component": "test"})

    assert root.level == logging.DEBUG
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)
    assert any(isinstance(f, ContextFilter) for f in root.filters)

    logging.getLogger("clicktoplay.test").debug("hello from test")
    for handler in root.handlers:
        handler.flush()
    assert "hello from test" in log_file.read_text()


def test_colored_formatter_restores_levelname():
    formatter = ColoredFormatter("%(levelname)s %(message)s", use_colors=True)
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)

    output = formatter.format(record)

    assert "careful" in output
    assert "\x1b[" in output
    assert record.levelname == "WARNING"


def test_colored_formatter_plain():
    formatter = ColoredFormatter("%(levelname)s %(message)s", use_colors=False)
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "plain", None, None)
    assert formatter.format(record) == "INFO plain"


def test_time_operation(caplog):
    logger = logging.getLogger("clicktoplay.timer")
    with caplog.at_level(logging.DEBUG, logger="clicktoplay.timer"):
        with time_operation(logger, "Step 1") as timer:
            pass

        with pytest.raises(RuntimeError):
            with time_operation(logger, "Step 2"):
                raise RuntimeError("boom")

    assert timer.elapsed >= 0
    assert "Step 1 passed in" in caplog.text
    assert "Step 2 failed after" in caplog.text
    assert "boom" in caplog.text
