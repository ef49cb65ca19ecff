import logging
from pathlib import Path
from typing import Optional

from channel_repl.runtime_config import get_data_dir

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[Path] = None) -> Path:
    """Route log records to a file so they never interleave with the live prompt.

    Calling this more than once for the same file does not stack handlers.

    Returns:
        The path of the log file in use.
    """
    log_path = log_file or get_data_dir() / "channel_repl.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)

    resolved = str(log_path.resolve())
    for handler in root.handlers:
        if (
            isinstance(handler, logging.FileHandler)
            and handler.baseFilename == resolved
        ):
            return log_path

    file_handler = logging.FileHandler(log_path)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)
    return log_path
