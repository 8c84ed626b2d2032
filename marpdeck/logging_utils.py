"""Console and run-log handlers for the ``marpdeck`` logger."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from .pipeline_common import logger

RUN_LOG_NAME = "run.log"
CONSOLE_FORMAT = "[%(levelname)s] %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def reset_logging() -> None:
    """Detach and close every handler installed by ``setup_logging``."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(verbose: bool = False, run_dir: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Configure the package logger for one CLI invocation.

    Console output always goes to stderr. With ``run_dir`` every record is
    also written to ``run_dir/run.log``, truncated per run.

    Returns:
        Optional[Path]: the run log path, or None when only the console is used.
    """
    reset_logging()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if run_dir is None:
        return None
    log_path = Path(run_dir) / RUN_LOG_NAME
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    except OSError as exc:
        logger.warning("Failed to open run log at %s (%s); logging to console only.", log_path, exc)
        return None
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(file_handler)
    return log_path
