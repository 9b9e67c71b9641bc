"""
Logging setup.

Log records go to a file under the data directory so they never end up
interleaved with the bytes going over the command stream.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from serial_cmdline.runtime_config import LOG_LEVEL_ENV, get_data_dir

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "serial_cmdline.log"


def setup_logging(
    level: Optional[int] = None, log_file: Optional[Path] = None
) -> Path:
    """
    Configure the serial_cmdline logger to write to a file.

    Args:
        level: Log level; defaults to SERIAL_CMDLINE_LOG_LEVEL or INFO.
        log_file: Destination; defaults to <data dir>/serial_cmdline.log.

    Returns:
        The path of the log file.
    """
    if level is None:
        level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
        level = getattr(logging, level_name, logging.INFO)

    if log_file is None:
        log_dir = get_data_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / LOG_FILE_NAME

    logger = logging.getLogger("serial_cmdline")
    logger.setLevel(level)

    # Re-running setup (e.g. repeated create_app() in tests) must not stack handlers
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    return log_file
