import logging
from pathlib import Path
from typing import Iterator

import pytest

from channel_repl.logger import setup_logging


@pytest.fixture(autouse=True)
def isolated_root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def _file_handlers(path: Path) -> list[logging.FileHandler]:
    return [
        h
        for h in logging.getLogger().handlers
        if isinstance(h, logging.FileHandler)
        and h.baseFilename == str(path.resolve())
    ]


def test_default_log_file_lives_in_data_dir(tmp_path: Path) -> None:
    # XDG_DATA_HOME points into tmp_path for every test
    log_path = setup_logging()
    assert log_path.name == "channel_repl.log"
    assert log_path.parent.name == "channel_repl"
    assert log_path.parent.exists()


def test_setup_logging_is_idempotent(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "session.log"
    setup_logging(logging.DEBUG, log_file)
    setup_logging(logging.DEBUG, log_file)

    assert len(_file_handlers(log_file)) == 1
    assert logging.getLogger().level == logging.DEBUG


def test_records_are_written_to_file(tmp_path: Path) -> None:
    log_file = tmp_path / "session.log"
    setup_logging(logging.INFO, log_file)

    logging.getLogger("channel_repl.test").info("channel opened")
    for handler in _file_handlers(log_file):
        handler.flush()

    text = log_file.read_text()
    assert "channel_repl.test - INFO - channel opened" in text
